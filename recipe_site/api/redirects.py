"""Permanent redirects from the old WordPress URLs."""

from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse

from recipe_site.services.redirects import LEGACY_PREFIX, migrate_wordpress_url

router = APIRouter(tags=["redirects"])


@router.get(f"/{LEGACY_PREFIX}", include_in_schema=False)
@router.get(f"/{LEGACY_PREFIX}/{{path:path}}", include_in_schema=False)
def legacy_redirect(path: str = ""):
    """Redirect an old WordPress URL to its new location."""
    return RedirectResponse(
        url=migrate_wordpress_url(f"/{LEGACY_PREFIX}/{path}"),
        status_code=status.HTTP_301_MOVED_PERMANENTLY,
    )
