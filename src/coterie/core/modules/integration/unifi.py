"""UniFi Access door control: only members in good standing may open the doors."""

from typing import Any

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
from coterie.errors import IntegrationError

logger = structlog.get_logger(__name__)

USERS_PATH = "/api/v1/developer/users"


class UnifiIntegration(Integration):
    name = "unifi"

    def __init__(
        self,
        enabled: bool,
        controller_url: str,
        api_token: str,
        site_id: str = "default",
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(enabled)
        self._controller_url = controller_url
        self._site_id = site_id
        self._client = client or httpx.AsyncClient(
            base_url=controller_url,
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=timeout,
        )

    @classmethod
    def from_config(cls, config: Config) -> "UnifiIntegration":
        return cls(
            enabled=config.unifi_enabled,
            controller_url=config.unifi_controller_url,
            api_token=config.unifi_api_token,
            site_id=config.unifi_site_id,
            timeout=config.integration_timeout_seconds,
        )

    async def health_check(self) -> None:
        if not self._controller_url:
            raise IntegrationError("UniFi controller URL not configured")
        await self._request("GET", USERS_PATH, params={"page_num": 1, "page_size": 1})

    async def handle_event(self, event: LifecycleEvent) -> None:
        if isinstance(event, MemberActivated):
            await self.update_access(event.member.email, active=True)
        elif isinstance(event, MemberExpired | MemberDeleted):
            await self.update_access(event.member.email, active=False)
        elif isinstance(event, MemberUpdated):
            await self.update_access(event.new.email, active=event.new.has_good_standing)

    async def update_access(self, email: str, active: bool) -> None:
        user_id = await self._find_user_id(email)
        if user_id is None:
            logger.warning("unifi_user_not_found", email=email)
            return
        status = "ACTIVE" if active else "DEACTIVATED"
        await self._request("PUT", f"{USERS_PATH}/{user_id}", json={"status": status})
        logger.info("unifi_access_updated", email=email, status=status, site_id=self._site_id)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _find_user_id(self, email: str) -> str | None:
        payload = await self._request("GET", f"{USERS_PATH}/search", params={"keyword": email})
        for user in payload.get("data") or []:
            if user.get("user_email") == email:
                return str(user["id"])
        return None

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise IntegrationError(f"UniFi controller unreachable: {e}") from e
        if response.is_error:
            raise IntegrationError(f"UniFi controller returned {response.status_code}")
        payload: dict[str, Any] = response.json()
        if payload.get("code", "SUCCESS") != "SUCCESS":
            raise IntegrationError(f"UniFi controller error: {payload.get('msg', payload['code'])}")
        return payload
