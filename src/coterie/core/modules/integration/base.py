from abc import ABC, abstractmethod

from coterie.core.modules.integration.models import LifecycleEvent


class Integration(ABC):
    """Connector to an external system that reacts to member lifecycle events."""

    name: str

    def __init__(self, enabled: bool) -> None:
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @abstractmethod
    async def health_check(self) -> None:
        """Raise IntegrationError when the external system is not usable."""

    @abstractmethod
    async def handle_event(self, event: LifecycleEvent) -> None:
        """React to a lifecycle event. Errors are isolated by the dispatcher."""

    async def aclose(self) -> None:
        """Release network resources on shutdown."""
