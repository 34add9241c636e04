import os
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENV", "test")

import app.models  # noqa: E402,F401 - register every table on the metadata
from app.core.db import get_session  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models.company import Company  # noqa: E402
from app.models.patient import Patient  # noqa: E402
from app.models.professional import Professional  # noqa: E402


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def clinic(session: AsyncSession) -> SimpleNamespace:
    """Two companies; the first has two patients and two professionals."""
    company = Company(name="Clinica Exemplo", document="12345678000190")
    other_company = Company(name="Outra Clinica", document="98765432000110")
    session.add_all([company, other_company])
    await session.flush()

    ana = Patient(company_id=company.id, name="Ana Souza")
    bruno = Patient(company_id=company.id, name="Bruno Lima")
    outsider = Patient(company_id=other_company.id, name="Carla Dias")
    maria = Professional(company_id=company.id, name="Dra. Maria Santos", specialty="Dentistry")
    carlos = Professional(company_id=company.id, name="Dr. Carlos Mendes", specialty="Orthodontics")
    session.add_all([ana, bruno, outsider, maria, carlos])
    await session.commit()

    return SimpleNamespace(
        company=company,
        other_company=other_company,
        ana=ana,
        bruno=bruno,
        outsider=outsider,
        maria=maria,
        carlos=carlos,
    )


@pytest.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as client:
        yield client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def auth_headers(client: AsyncClient) -> dict[str, str]:
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "name": "Admin",
            "email": "admin@example.com",
            "password": "admin123",
            "company_name": "Clinica Exemplo",
            "company_document": "12345678000190",
        },
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
