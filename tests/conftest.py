"""Shared pytest fixtures."""

from collections.abc import AsyncIterator, Iterator

import pytest
from fakes import FakeDatabase, RecordingIntegration
from fastapi.testclient import TestClient
from helpers import ADMIN_PASSWORD, MEMBER_PASSWORD, complete_setup, login

from coterie.app import App
from coterie.config import Config
from coterie.core.core import Services
from coterie.core.modules.integration.dispatcher import IntegrationDispatcher
from coterie.core.modules.member.models import CreateMemberRequest, Member, MemberStatus, MemberUpdate
from coterie.web.server import create_fastapi_app


@pytest.fixture
def config() -> Config:
    return Config(
        _env_file=None,
        database_url="mongodb://localhost:27017/coterie_test",
        secure_cookies=False,
        maintenance_interval_minutes=0,
    )


@pytest.fixture
def database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def recorder() -> RecordingIntegration:
    return RecordingIntegration()


@pytest.fixture
async def app(config, database, recorder) -> AsyncIterator[App]:
    """Started application backed by the in-memory database."""
    instance = App(config, database=database, integrations=IntegrationDispatcher([recorder]))
    async with instance.lifespan():
        yield instance


@pytest.fixture
def services(app) -> Services:
    return app._core.services


@pytest.fixture
def make_member(services):
    """Create a member and force it into the given status."""

    async def _make(
        username: str = "alice",
        status: MemberStatus = MemberStatus.ACTIVE,
        password: str = MEMBER_PASSWORD,
        **fields,
    ) -> Member:
        member = await services.lifecycle.create_member(
            CreateMemberRequest(
                email=f"{username}@example.com", username=username, full_name=username.title(), password=password
            )
        )
        return await services.member.update(member.id, MemberUpdate(status=status, **fields))

    return _make


@pytest.fixture
def client(config, database, recorder) -> Iterator[TestClient]:
    """HTTP client for an application that has not been set up yet."""
    instance = App(config, database=database, integrations=IntegrationDispatcher([recorder]))
    with TestClient(create_fastapi_app(instance, config)) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client) -> tuple[TestClient, str]:
    """Client logged in as the administrator created by setup, with its CSRF token."""
    complete_setup(client)
    return client, login(client, "admin", ADMIN_PASSWORD)
