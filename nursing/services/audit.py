import logging
from typing import Optional, Any, Dict

from nursing.models import AuditEvent, Nurse

logger = logging.getLogger(__name__)


def log_action(*, nurse: Optional[Nurse], action: str, object_type: Optional[str]=None, object_id: Any=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    event = AuditEvent.objects.create(
        nurse=nurse if isinstance(nurse, Nurse) and nurse.pk else None,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )
    logger.info('audit %s %s:%s by %s', action, object_type, object_id, getattr(nurse, 'nurse_id', None))
    return event
