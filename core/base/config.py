"""
Access to the PROCUREMENT settings block.

Read at call time (not import time) so override_settings works in tests.
"""
from django.conf import settings

DEFAULTS = {
    'DEFAULT_CURRENCY': 'AED',
    'DEFAULT_PAYMENT_TERMS': 'Net 30',
    'DEFAULT_DELIVERY_ADDRESS': 'Main Warehouse',
    'PORTAL_BASE_URL': 'https://portal.example.com',
    'NOTIFICATION_MAILBOXES': {
        'procurement': 'procurement@company.com',
    },
    'NOTIFICATIONS_FAIL_SILENTLY': True,
    'AUTO_GENERATE_PR_ON_QUOTE_APPROVAL': False,
    'AUTO_GENERATE_PO_ON_PR_APPROVAL': False,
    'COMPLIANCE_EXPIRY_WARNING_DAYS': 30,
}


def procurement_setting(name):
    configured = getattr(settings, 'PROCUREMENT', {}) or {}
    if name in configured:
        return configured[name]
    if name not in DEFAULTS:
        raise KeyError(f"Unknown PROCUREMENT setting '{name}'")
    return DEFAULTS[name]


def mailbox_for(role):
    """Shared mailbox for a role, falling back to the procurement mailbox."""
    mailboxes = procurement_setting('NOTIFICATION_MAILBOXES')
    return mailboxes.get(role) or mailboxes.get('procurement') or DEFAULTS['NOTIFICATION_MAILBOXES']['procurement']
