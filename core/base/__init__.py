"""
Shared building blocks for the core and procurement apps.

    models.py    TimestampMixin, AuditMixin, SoftDeleteMixin, generate_document_number
    managers.py  SoftDeleteQuerySet / SoftDeleteManager
    config.py    procurement_setting() access to settings.PROCUREMENT

Import from the submodules directly; importing models here would load them
before the app registry is ready.
"""
