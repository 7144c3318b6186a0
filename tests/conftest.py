"""Shared test fixtures for the uptime and content change evaluation core."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest
import structlog

from src.services.database import Database

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _reset_structlog() -> None:
    """Undo any logging configuration a CLI test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> str:
    """Provide a temporary database file path."""
    return str(tmp_path / "test.db")


@pytest.fixture
def db(tmp_db_path: str) -> Database:
    """Provide an initialized temporary database."""
    database = Database(db_path=tmp_db_path)
    database.init_db()
    yield database
    database.close()


def insert_target(
    db: Database,
    url: str = "https://example.com",
    confirmation_threshold: int = 2,
    monitoring_enabled: bool = True,
) -> int:
    """Insert a monitor target directly and return its ID."""
    now = datetime.now(UTC).isoformat()
    with db.transaction() as cursor:
        cursor.execute(
            """INSERT INTO monitor_targets
               (url, name, confirmation_threshold, monitoring_enabled, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (url, "Example", confirmation_threshold, 1 if monitoring_enabled else 0, now, now),
        )
        return cursor.lastrowid or 0


@pytest.fixture
def db_with_target(db: Database) -> tuple[Database, int]:
    """Provide a database with a single target (threshold 2). Returns (db, target_id)."""
    return db, insert_target(db)


@pytest.fixture
def sample_html() -> str:
    """HTML page with scripts, stylesheets, images and meta tags."""
    return """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="description" content="Example storefront">
    <meta property="og:title" content="Example">
    <link rel="stylesheet" href="/static/main.css">
    <link rel="icon" href="/favicon.ico">
    <script src="https://cdn.example.com/app.js"></script>
    <script>window.inline = true;</script>
</head>
<body>
    <img src="/img/logo.png" alt="logo">
    <img src="/img/hero.jpg" alt="hero">
    <p>Welcome to the example storefront. Browse our catalogue.</p>
</body>
</html>"""


@pytest.fixture
def success_probe_data(sample_html: str) -> dict[str, Any]:
    """Keyword arguments for a SUCCESS ProbeResult."""
    return {
        "outcome": "SUCCESS",
        "http_status": 200,
        "final_url": "https://example.com/",
        "latency_ms": 120,
        "body": sample_html,
        "headers": {"Content-Type": "text/html; charset=utf-8"},
    }


@pytest.fixture
def make_target(db: Database) -> Any:
    """Factory fixture inserting additional targets into ``db``."""

    def _make(url: str = "https://example.com", **kwargs: Any) -> int:
        return insert_target(db, url=url, **kwargs)

    return _make
