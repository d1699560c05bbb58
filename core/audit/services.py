"""
Audit service.

Views and services call AuditService.record() after each mutation:

    AuditService.record(
        AuditLog.ENTITY_PURCHASE_REQUISITION, pr.pk, 'pr_approved',
        actor=request.user, after={'status': pr.status}, request=request,
    )
"""
import json
import logging
from decimal import Decimal
from datetime import date, datetime

from core.audit.models import AuditLog

logger = logging.getLogger(__name__)


def _to_json(value):
    """Snapshots may hold Decimals and dates; store them as JSON-safe values."""
    if value is None:
        return None
    return json.loads(json.dumps(value, default=_json_default))


def _json_default(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


class AuditService:

    @staticmethod
    def record(entity_type, entity_id, action, actor=None, before=None, after=None, request=None):
        """Write one audit row. actor=None records a system action."""
        ip_address = None
        user_agent = ''
        if request is not None:
            meta = getattr(request, 'META', {})
            forwarded = meta.get('HTTP_X_FORWARDED_FOR')
            ip_address = forwarded.split(',')[0].strip() if forwarded else meta.get('REMOTE_ADDR')
            user_agent = meta.get('HTTP_USER_AGENT', '')[:255]

        actor_user = actor if actor is not None and getattr(actor, 'is_authenticated', False) else None

        entry = AuditLog.objects.create(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor=actor_user,
            actor_name=actor_user.name if actor_user else 'SYSTEM',
            before_data=_to_json(before),
            after_data=_to_json(after),
            ip_address=ip_address or None,
            user_agent=user_agent,
        )
        logger.info("Audit: %s", entry)
        return entry

    @staticmethod
    def history(entity_type, entity_id):
        return AuditLog.objects.filter(entity_type=entity_type, entity_id=entity_id).order_by('timestamp', 'id')
