"""Notifier that only logs workflow events."""

import logging

from signflow.domain.value_objects import WorkflowEvent

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Default notifier when no webhook is configured."""

    async def notify(self, event: WorkflowEvent) -> None:
        logger.info(
            "Workflow event %s on document %s (signer=%s)",
            event.type.value,
            event.document_id,
            event.signer_id,
        )
