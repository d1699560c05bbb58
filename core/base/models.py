from django.conf import settings
from django.db import models
from django.db.models import IntegerField, Max
from django.db.models.functions import Cast, Substr
from django.utils import timezone


class TimestampMixin(models.Model):
    """
    created_at / updated_at maintained by the ORM.
    """
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Timestamp when record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when record was last modified"
    )

    class Meta:
        abstract = True


class AuditMixin(TimestampMixin):
    """
    Adds created_by on top of the timestamps.

    Fields:
        - created_at: Timestamp when record was created
        - updated_at: Timestamp when record was last modified
        - created_by: User who created the record (optional)

    created_by is set by the service or serializer that creates the record,
    from request.user.
    """
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_created',
        help_text="User who created this record"
    )

    class Meta:
        abstract = True


class SoftDeleteMixin(models.Model):
    """
    Records are deactivated instead of deleted so that documents referencing
    them (quotes, PRs, POs) keep their history.

    Methods:
        - deactivate(): soft delete
        - reactivate(): undo a soft delete
    """
    is_active = models.BooleanField(default=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True

    def deactivate(self):
        self.is_active = False
        self.deactivated_at = timezone.now()
        self.save()

    def reactivate(self):
        self.is_active = True
        self.deactivated_at = None
        self.save()


def generate_document_number(model, field_name, prefix, year=None):
    """
    Next sequential number for a document type, e.g. ``PR-2025-007``.

    The sequence restarts every year and continues from the highest numeric
    suffix already stored for that prefix and year, so PR-2025-1000 follows
    PR-2025-999.
    """
    year = year or timezone.now().year
    stem = f"{prefix}-{year}-"
    highest = model.objects.filter(**{f"{field_name}__startswith": stem}).aggregate(
        highest=Max(Cast(Substr(field_name, len(stem) + 1), IntegerField()))
    )['highest']
    return f"{stem}{(highest or 0) + 1:03d}"
