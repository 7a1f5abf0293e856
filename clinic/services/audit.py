import logging
from typing import Optional, Any, Dict

from django.contrib.auth import get_user_model

from clinic.models import AuditEvent

logger = logging.getLogger(__name__)

User = get_user_model()


def log_action(*, user: Optional[User], action: str, object_type: Optional[str] = None,
               object_id: Optional[object] = None, detail: Optional[Dict[str, Any]] = None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=user if getattr(user, 'pk', None) else None,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )


def safe_log_action(**kwargs) -> Optional[AuditEvent]:
    """``log_action`` for request paths: a failed audit write is logged, never raised."""
    try:
        return log_action(**kwargs)
    except Exception:
        logger.warning("audit write failed for %s", kwargs.get('action'), exc_info=True)
        return None
