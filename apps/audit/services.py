# apps/audit/services.py

import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def record_operation(user, action, model_name, object_id=None, **details):
    """
    Write an audit entry for an operation performed by ``user``.

    ``user`` may be ``None`` for system-initiated work (e.g. a management
    command run without an operator).
    """
    entry = AuditLog.objects.create(
        user=user if getattr(user, 'pk', None) else None,
        action=action,
        model_name=model_name,
        object_id=str(object_id) if object_id is not None else '',
        details=details,
    )
    logger.debug(f"Audit: {action} {model_name} {entry.object_id} by {user}")
    return entry
