import logging
from typing import Any

from sqlalchemy.orm import Session

from taskforms.models.audit_event import AuditEvent
from taskforms.models.user import User

logger = logging.getLogger(__name__)


def log_event(
    *,
    db: Session,
    actor: User | None,
    action: str,
    entity_type: str,
    entity_id: str,
    metadata: dict[str, Any] | None = None,
) -> AuditEvent:
    """
    Record who changed what. The row joins the caller's transaction, so it is
    only kept if the change itself commits.
    """
    event = AuditEvent(
        actor_user_id=actor.id if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        event_metadata=metadata,
    )
    db.add(event)
    logger.debug("audit %s %s/%s by %s", action, entity_type, entity_id, actor.email if actor else "-")
    return event
