"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from recipe_site import models  # noqa: F401
from recipe_site.database import Base, get_db
from recipe_site.main import app

# Use test database - PostgreSQL when configured, SQLite locally
if os.getenv("DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/recipes", "/recipes_test")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def build_wxr(*items: str) -> str:
    """Wrap item elements in a minimal WXR document."""
    body = "\n".join(items)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0" xmlns:wp="http://wordpress.org/export/1.2/" '
        'xmlns:content="http://purl.org/rss/1.0/modules/content/">\n'
        f"<channel>\n{body}\n</channel>\n</rss>\n"
    )


def wxr_post(
    post_id: int,
    title: str,
    content: str,
    slug: str = "",
    status: str = "publish",
    post_type: str = "post",
    categories: tuple[str, ...] = (),
    link: str = "",
    post_date: str = "2021-03-14 10:00:00",
) -> str:
    """One WXR post item."""
    category_xml = "".join(
        f'<category domain="category" nicename="{c}"><![CDATA[{c}]]></category>' for c in categories
    )
    return (
        "<item>"
        f"<title><![CDATA[{title}]]></title>"
        f"<link>{link}</link>"
        f"<content:encoded><![CDATA[{content}]]></content:encoded>"
        f"<wp:post_id>{post_id}</wp:post_id>"
        f"<wp:post_date><![CDATA[{post_date}]]></wp:post_date>"
        f"<wp:post_name><![CDATA[{slug}]]></wp:post_name>"
        f"<wp:status><![CDATA[{status}]]></wp:status>"
        f"<wp:post_parent>0</wp:post_parent>"
        f"<wp:post_type><![CDATA[{post_type}]]></wp:post_type>"
        f"{category_xml}"
        "</item>"
    )


def wxr_attachment(attachment_id: int, url: str, parent_id: int, title: str = "") -> str:
    """One WXR attachment item."""
    return (
        "<item>"
        f"<title><![CDATA[{title}]]></title>"
        f"<wp:post_id>{attachment_id}</wp:post_id>"
        f"<wp:status><![CDATA[inherit]]></wp:status>"
        f"<wp:post_parent>{parent_id}</wp:post_parent>"
        f"<wp:post_type><![CDATA[attachment]]></wp:post_type>"
        f"<wp:attachment_url><![CDATA[{url}]]></wp:attachment_url>"
        "</item>"
    )


RECIPE_CONTENT = (
    "[et_pb_section][et_pb_text]"
    "<h3>Zutaten</h3>"
    "<ul>"
    "<li>500 g Weizenmehl Type 550</li>"
    "<li>250 ml lauwarme Milch</li>"
    "<li>1 Würfel frische Hefe</li>"
    "</ul>"
    "<h3>Zubereitung</h3>"
    "<ol>"
    "<li>Die Hefe in der lauwarmen Milch auflösen.</li>"
    "<li>Alles zu einem glatten Teig verkneten und 45 Minuten gehen lassen.</li>"
    "</ol>"
    "[/et_pb_text][/et_pb_section]"
)
