"""Approval workflow models.

AuthorizationMatrix holds the approval rules per project. A workflow instance
is attached to any approvable object through a generic foreign key and walks
through one stage per required approval level.
"""

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.core.validators import MinValueValidator
from django.db import models

from core.user_accounts.models import UserRole


class AuthorizationMatrix(models.Model):
    """One approval rule: amounts in [threshold_min, threshold_max) need this level.

    A rule without a project applies to every project that has no rules of
    its own. A null threshold_max means no upper bound.
    """

    project = models.ForeignKey(
        'projects.Project',
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name='authorization_rules',
        help_text="Empty for the default rules shared by all projects"
    )
    approval_level = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    threshold_min = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)]
    )
    threshold_max = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    approver_role = models.CharField(max_length=20, choices=UserRole.choices)
    approver_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='authorization_rules',
        help_text="Optional named approver in addition to the role"
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "authorization_matrix"
        ordering = ["project_id", "approval_level", "threshold_min"]
        indexes = [
            models.Index(fields=["project", "is_active"], name="auth_matrix_project_idx"),
        ]

    def __str__(self):
        upper = self.threshold_max if self.threshold_max is not None else "open"
        scope = self.project.code if self.project_id else "default"
        return f"[{scope}] L{self.approval_level} {self.threshold_min}-{upper} {self.approver_role}"

    def applies_to(self, amount):
        if amount < self.threshold_min:
            return False
        return self.threshold_max is None or amount < self.threshold_max


class ApprovalWorkflowInstance(models.Model):
    """Runtime approval of one object.

    required_levels is a snapshot taken when the workflow starts, so later
    matrix edits do not change a running approval.
    """

    STATUS_PENDING = "pending"
    STATUS_IN_PROGRESS = "in_progress"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_IN_PROGRESS, "In Progress"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_CANCELLED, "Cancelled"),
    ]
    ACTIVE_STATUSES = [STATUS_PENDING, STATUS_IN_PROGRESS]

    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField()
    content_object = GenericForeignKey("content_type", "object_id")

    amount = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    required_levels = models.JSONField(default=list, blank=True)
    current_level = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=15,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )

    started_at = models.DateTimeField(auto_now_add=True)
    finished_at = models.DateTimeField(null=True, blank=True)
    completed_stage_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "approval_workflow_instance"
        indexes = [
            models.Index(fields=["content_type", "object_id"], name="approval_wf_object_idx"),
            models.Index(fields=["status", "current_level"], name="approval_wf_status_idx"),
        ]

    def __str__(self):
        return f"Workflow for {self.content_type.model} #{self.object_id} ({self.status})"

    @property
    def max_level(self):
        return max(self.required_levels) if self.required_levels else 0

    @property
    def is_finished(self):
        return self.status not in self.ACTIVE_STATUSES


class ApprovalWorkflowStageInstance(models.Model):
    """One approval level of a running workflow."""

    STATUS_PENDING = "pending"
    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    workflow_instance = models.ForeignKey(
        ApprovalWorkflowInstance,
        related_name="stage_instances",
        on_delete=models.CASCADE
    )
    approval_level = models.PositiveIntegerField()
    required_roles = models.JSONField(default=list, blank=True)
    approver_user_ids = models.JSONField(default=list, blank=True)

    status = models.CharField(
        max_length=12,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    activated_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "approval_workflow_stage_instance"
        ordering = ["workflow_instance", "approval_level"]
        indexes = [
            models.Index(fields=["workflow_instance", "status"], name="approval_stage_status_idx"),
        ]

    def __str__(self):
        return f"Level {self.approval_level} of {self.workflow_instance}"

    def can_act(self, user):
        """Admins, holders of a required role, or a named approver."""
        if user is None or not user.is_authenticated:
            return False
        if user.is_admin():
            return True
        return user.role in self.required_roles or user.pk in self.approver_user_ids


class ApprovalAction(models.Model):
    """Audit log of user actions within a stage instance (the approval record)."""

    ACTION_APPROVE = "approve"
    ACTION_REJECT = "reject"
    ACTION_COMMENT = "comment"
    ACTION_CHOICES = [
        (ACTION_APPROVE, "Approve"),
        (ACTION_REJECT, "Reject"),
        (ACTION_COMMENT, "Comment"),
    ]

    stage_instance = models.ForeignKey(
        ApprovalWorkflowStageInstance,
        related_name="actions",
        on_delete=models.CASCADE
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="approval_actions",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Null for system actions"
    )
    action = models.CharField(max_length=10, choices=ACTION_CHOICES)
    comment = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "approval_action"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["stage_instance", "action"], name="approval_action_stage_idx"),
        ]

    def __str__(self):
        user_str = self.user if self.user else "SYSTEM"
        return f"{self.action} by {user_str} on {self.stage_instance}"
