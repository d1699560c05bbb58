from django.conf import settings
from django.db import models

from core.base.models import AuditMixin


class Project(AuditMixin):
    """A project procurement documents are raised against."""

    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='projects',
        help_text="Users assigned to this project"
    )

    class Meta:
        db_table = 'project'
        ordering = ['name']
        indexes = [
            models.Index(fields=['status'], name='project_status_idx'),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"
