"""Notifier port - receives workflow events."""

from typing import Protocol

from signflow.domain.value_objects import WorkflowEvent


class Notifier(Protocol):
    """Delivers workflow events (email, webhook, ...).

    Implementations raise NotificationError on failure; the engine logs it
    and carries on.
    """

    async def notify(self, event: WorkflowEvent) -> None: ...
