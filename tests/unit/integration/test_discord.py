"""Tests for DiscordIntegration against a mocked Discord API."""

import httpx
import pytest

from coterie.core.modules.integration.discord import DISCORD_API_URL, DiscordIntegration
from coterie.core.modules.integration.models import MemberActivated, MemberDeleted, MemberExpired, MemberUpdated
from coterie.core.modules.member.models import Member, MemberStatus
from coterie.errors import IntegrationError

GUILD = "guild1"
MEMBER_ROLE = "role-member"
EXPIRED_ROLE = "role-expired"


def _member(discord_id: str | None = "42", status: MemberStatus = MemberStatus.ACTIVE) -> Member:
    return Member(
        email="a@example.com", username="a", full_name="A", password_hash="x", status=status, discord_id=discord_id
    )


def _integration(handler, bot_token: str = "token") -> DiscordIntegration:
    client = httpx.AsyncClient(base_url=DISCORD_API_URL, transport=httpx.MockTransport(handler))
    return DiscordIntegration(
        enabled=True,
        bot_token=bot_token,
        guild_id=GUILD,
        member_role_id=MEMBER_ROLE,
        expired_role_id=EXPIRED_ROLE,
        client=client,
    )


class Recorder:
    def __init__(self, status_code: int = 204) -> None:
        self.calls: list[tuple[str, str]] = []
        self.status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path.rsplit("/", 1)[-1]))
        return httpx.Response(self.status_code)


class TestHandleEvent:
    """Tests for role changes per event."""

    async def test_activation_grants_member_role(self):
        recorder = Recorder()
        await _integration(recorder).handle_event(MemberActivated(member=_member()))
        assert recorder.calls == [("PUT", MEMBER_ROLE), ("DELETE", EXPIRED_ROLE)]

    async def test_expiration_swaps_roles(self):
        recorder = Recorder()
        await _integration(recorder).handle_event(MemberExpired(member=_member(status=MemberStatus.EXPIRED)))
        assert recorder.calls == [("PUT", EXPIRED_ROLE), ("DELETE", MEMBER_ROLE)]

    async def test_deletion_strips_both_roles(self):
        recorder = Recorder()
        await _integration(recorder).handle_event(MemberDeleted(member=_member()))
        assert recorder.calls == [("DELETE", MEMBER_ROLE), ("DELETE", EXPIRED_ROLE)]

    async def test_suspension_behaves_like_expiration(self):
        recorder = Recorder()
        event = MemberUpdated(old=_member(), new=_member(status=MemberStatus.SUSPENDED))
        await _integration(recorder).handle_event(event)
        assert recorder.calls == [("PUT", EXPIRED_ROLE), ("DELETE", MEMBER_ROLE)]

    async def test_update_without_status_change_ignored(self):
        recorder = Recorder()
        await _integration(recorder).handle_event(MemberUpdated(old=_member(), new=_member()))
        assert recorder.calls == []

    async def test_member_without_discord_id_skipped(self):
        recorder = Recorder()
        await _integration(recorder).handle_event(MemberActivated(member=_member(discord_id=None)))
        assert recorder.calls == []

    async def test_removing_missing_role_is_fine(self):
        recorder = Recorder(status_code=404)
        await _integration(recorder).handle_event(MemberDeleted(member=_member()))
        assert len(recorder.calls) == 2

    async def test_api_error_raises(self):
        with pytest.raises(IntegrationError):
            await _integration(Recorder(status_code=403)).handle_event(MemberActivated(member=_member()))


class TestHealthCheck:
    async def test_missing_token_unhealthy(self):
        with pytest.raises(IntegrationError, match="token"):
            await _integration(Recorder(200), bot_token="").health_check()

    async def test_reachable_api_healthy(self):
        await _integration(lambda request: httpx.Response(200, json={"id": "bot"})).health_check()

    async def test_rejected_token_unhealthy(self):
        with pytest.raises(IntegrationError, match="401"):
            await _integration(lambda request: httpx.Response(401)).health_check()
