from collections.abc import Iterable
from typing import Self

import structlog

from coterie.core.modules.integration.base import Integration
from coterie.core.modules.integration.models import LifecycleEvent
from coterie.errors import IntegrationError

logger = structlog.get_logger(__name__)


class IntegrationDispatcher:
    """Fans lifecycle events out to integrations.

    The adapter set is fixed at construction. Delivery is sequential and
    at-most-once: an adapter that fails is logged and skipped, the remaining
    adapters still receive the event.
    """

    def __init__(self, adapters: Iterable[Integration] = ()) -> None:
        registered: list[Integration] = []
        for adapter in adapters:
            if adapter.enabled:
                registered.append(adapter)
                logger.info("integration_registered", integration=adapter.name)
            else:
                logger.debug("integration_disabled", integration=adapter.name)
        self._adapters = tuple(registered)

    @property
    def adapters(self) -> tuple[Integration, ...]:
        return self._adapters

    def register(self, adapter: Integration) -> Self:
        """Return a dispatcher that also delivers to `adapter` if it is enabled."""
        return type(self)((*self._adapters, adapter))

    async def handle_event(self, event: LifecycleEvent) -> None:
        for adapter in self._adapters:
            if not adapter.enabled:
                continue
            try:
                await adapter.handle_event(event)
            except Exception:
                logger.exception("integration_failed", integration=adapter.name, event_type=event.type)
            else:
                logger.debug("integration_handled_event", integration=adapter.name, event_type=event.type)

    async def health_check_all(self) -> list[tuple[str, IntegrationError | None]]:
        results: list[tuple[str, IntegrationError | None]] = []
        for adapter in self._adapters:
            try:
                await adapter.health_check()
            except IntegrationError as e:
                results.append((adapter.name, e))
            except Exception as e:
                results.append((adapter.name, IntegrationError(str(e))))
            else:
                results.append((adapter.name, None))
        return results

    async def aclose(self) -> None:
        for adapter in self._adapters:
            await adapter.aclose()
