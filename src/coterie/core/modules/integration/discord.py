"""Discord role sync: members in good standing carry the member role, lapsed ones the expired role."""

import httpx
import structlog

from coterie.config import Config
from coterie.core.modules.integration.base import Integration
from coterie.core.modules.integration.models import (
    LifecycleEvent,
    MemberActivated,
    MemberDeleted,
    MemberExpired,
    MemberUpdated,
)
from coterie.core.modules.member.models import Member, MemberStatus
from coterie.errors import IntegrationError

logger = structlog.get_logger(__name__)

DISCORD_API_URL = "https://discord.com/api/v10"


class DiscordIntegration(Integration):
    name = "discord"

    def __init__(
        self,
        enabled: bool,
        bot_token: str,
        guild_id: str,
        member_role_id: str,
        expired_role_id: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(enabled)
        self._bot_token = bot_token
        self._guild_id = guild_id
        self._member_role_id = member_role_id
        self._expired_role_id = expired_role_id
        self._client = client or httpx.AsyncClient(
            base_url=DISCORD_API_URL,
            headers={"Authorization": f"Bot {bot_token}"},
            timeout=timeout,
        )

    @classmethod
    def from_config(cls, config: Config) -> "DiscordIntegration":
        return cls(
            enabled=config.discord_enabled,
            bot_token=config.discord_bot_token,
            guild_id=config.discord_guild_id,
            member_role_id=config.discord_member_role_id,
            expired_role_id=config.discord_expired_role_id,
            timeout=config.integration_timeout_seconds,
        )

    async def health_check(self) -> None:
        if not self._bot_token:
            raise IntegrationError("Discord bot token not configured")
        try:
            response = await self._client.get("/users/@me")
        except httpx.HTTPError as e:
            raise IntegrationError(f"Discord API unreachable: {e}") from e
        if response.status_code != httpx.codes.OK:
            raise IntegrationError(f"Discord API returned {response.status_code}")

    async def handle_event(self, event: LifecycleEvent) -> None:
        if isinstance(event, MemberActivated):
            await self._mark_current(event.member)
        elif isinstance(event, MemberExpired):
            await self._mark_expired(event.member)
        elif isinstance(event, MemberDeleted):
            await self._strip_roles(event.member)
        elif isinstance(event, MemberUpdated) and event.status_changed:
            if event.new.has_good_standing:
                await self._mark_current(event.new)
            elif event.new.status in (MemberStatus.EXPIRED, MemberStatus.SUSPENDED):
                await self._mark_expired(event.new)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _mark_current(self, member: Member) -> None:
        if member.discord_id is None:
            logger.debug("discord_id_missing", member_id=member.id)
            return
        await self._set_role(member.discord_id, self._member_role_id, present=True)
        await self._set_role(member.discord_id, self._expired_role_id, present=False)

    async def _mark_expired(self, member: Member) -> None:
        if member.discord_id is None:
            logger.debug("discord_id_missing", member_id=member.id)
            return
        await self._set_role(member.discord_id, self._expired_role_id, present=True)
        await self._set_role(member.discord_id, self._member_role_id, present=False)

    async def _strip_roles(self, member: Member) -> None:
        if member.discord_id is None:
            return
        await self._set_role(member.discord_id, self._member_role_id, present=False)
        await self._set_role(member.discord_id, self._expired_role_id, present=False)

    async def _set_role(self, discord_id: str, role_id: str, present: bool) -> None:
        if not role_id:
            return
        path = f"/guilds/{self._guild_id}/members/{discord_id}/roles/{role_id}"
        try:
            response = await (self._client.put(path) if present else self._client.delete(path))
        except httpx.HTTPError as e:
            raise IntegrationError(f"Discord request failed: {e}") from e
        # Removing a role the user does not have answers 404, which is fine
        if response.status_code == httpx.codes.NOT_FOUND and not present:
            return
        if response.is_error:
            raise IntegrationError(f"Discord role update returned {response.status_code}")
        logger.info("discord_role_updated", discord_id=discord_id, role_id=role_id, present=present)
