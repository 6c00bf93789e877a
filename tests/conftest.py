"""
Test fixtures for homepage tests.

Every test gets its own site tree under tmp_path:

    <root>/
        index.html
        hello.txt
        db/post5.json, post0.json, post7.json (invalid JSON)
        assets/documents/blogtemplate.html
        assets/art/favicon.ico
"""

import json
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from homepage.core.config import Settings
from homepage.core.context import clear_context
from homepage.main import create_app


TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>{{ post.title }}</title></head>
<body>
<span id="number">{{ post.number }}</span>
<span id="last">{{ post.last }}</span>
<span id="next">{{ post.next }}</span>
<span id="timestamp">{{ post.timestamp }}</span>
<div id="main">{{ post.parsed_main }}</div>
</body>
</html>
"""

FAVICON_BYTES = b"\x00\x00\x01\x00\x01\x00\x10\x10fake-icon-payload\xff\xfe"

SAMPLE_POST = {
    "title": "T",
    "timestamp": "2020",
    "main": ["a", "b"],
}


def write_post(posts_dir: Path, token: str, record) -> Path:
    path = posts_dir / f"post{token}.json"
    if isinstance(record, (bytes, str)):
        path.write_bytes(record if isinstance(record, bytes) else record.encode("utf-8"))
    else:
        path.write_text(json.dumps(record), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_request_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Build an isolated site tree."""
    root = tmp_path / "site"
    posts_dir = root / "db"
    documents = root / "assets" / "documents"
    art = root / "assets" / "art"
    for directory in (posts_dir, documents, art):
        directory.mkdir(parents=True)

    (documents / "blogtemplate.html").write_text(TEMPLATE, encoding="utf-8")
    (art / "favicon.ico").write_bytes(FAVICON_BYTES)
    (root / "index.html").write_text("<html><body>home page</body></html>", encoding="utf-8")
    (root / "hello.txt").write_text("hello from the site root", encoding="utf-8")

    write_post(posts_dir, "5", SAMPLE_POST)
    write_post(posts_dir, "0", {"title": "First", "timestamp": "2019", "main": []})
    write_post(posts_dir, "7", "{not valid json")
    return root


@pytest.fixture
def site_settings(site_root: Path) -> Settings:
    return Settings(
        _env_file=None,
        SITE_ROOT=str(site_root),
        POSTS_DIR=str(site_root / "db"),
        TEMPLATE_PATH=str(site_root / "assets" / "documents" / "blogtemplate.html"),
        FAVICON_PATH=str(site_root / "assets" / "art" / "favicon.ico"),
    )


@pytest.fixture
def client(site_settings: Settings) -> Generator[TestClient, None, None]:
    """Test client running the app lifespan."""
    with TestClient(create_app(site_settings)) as test_client:
        yield test_client
