"""Loading of WordPress eXtended RSS (WXR) export files."""

import logging
from pathlib import Path

from recipe_site.config import Settings

logger = logging.getLogger(__name__)


class ExportFileNotFoundError(FileNotFoundError):
    """The WXR export file does not exist."""


def resolve_export_path(cli_path: str | None, settings: Settings) -> Path:
    """Prefer an explicit path from the command line over the configured one."""
    return Path(cli_path or settings.wxr_export_path)


def read_export(path: str | Path) -> str:
    """Read the whole export into memory as text.

    Undecodable bytes are replaced rather than aborting; the extractor
    tolerates such artifacts inside individual records.
    """
    export_path = Path(path)
    if not export_path.is_file():
        raise ExportFileNotFoundError(f"WordPress export not found: {export_path}")

    text = export_path.read_text(encoding="utf-8", errors="replace")
    logger.info(f"Loaded WordPress export {export_path} ({len(text) // 1024}KB)")
    return text
