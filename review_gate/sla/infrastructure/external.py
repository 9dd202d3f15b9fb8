"""
SLA External Service Integrations
==================================

Notification delivery for SLA warnings and breaches.

Delivery to chat or email lives outside this service; the default sink
writes structured log records that downstream shippers can route.
"""

from review_gate.shared.infrastructure.logging import get_logger
from review_gate.config import SLAStatus
from review_gate.sla.application.services import INotificationSink
from review_gate.sla.domain import SLANotification

logger = get_logger(__name__)


class LoggingNotificationSink(INotificationSink):
    """Emit SLA notifications as structured log records."""

    async def send(self, notification: SLANotification) -> bool:
        level = "warning" if notification.status == SLAStatus.BREACHED else "info"
        getattr(logger, level)(
            "SLA notification",
            extra={
                "artifact_id": notification.artifact_id,
                "project_id": notification.project_id,
                "sla_status": notification.status,
                "deadline": notification.deadline.isoformat(),
                "suggested_escalation_to": notification.suggested_escalation_to,
            }
        )
        return True

