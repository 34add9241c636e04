from app.core.db import to_async_url


def test_postgres_url_moves_to_asyncpg_and_drops_psycopg_params() -> None:
    url = to_async_url("postgresql://u:p@db.example.com:5432/clinic?sslmode=require&channel_binding=require&application_name=api")

    assert url == "postgresql+asyncpg://u:p@db.example.com:5432/clinic?application_name=api"


def test_sqlite_url_uses_aiosqlite() -> None:
    assert to_async_url("sqlite:///./clinic.db") == "sqlite+aiosqlite:///./clinic.db"


def test_async_urls_are_left_alone() -> None:
    assert to_async_url("sqlite+aiosqlite:///:memory:") == "sqlite+aiosqlite:///:memory:"
