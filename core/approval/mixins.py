"""Mixin for models that go through authorization-matrix approval.

Models using ApprovableMixin implement:

    get_approval_project()  project whose matrix rules apply
    get_approval_amount()   amount compared against the thresholds

and the workflow hooks called by ApprovalManager:

    on_approval_started(workflow_instance)
    on_stage_approved(stage_instance)
    on_fully_approved(workflow_instance)
    on_rejected(workflow_instance, stage_instance=None)
    on_cancelled(workflow_instance, reason=None)
"""

from django.contrib.contenttypes.fields import GenericRelation
from django.db import models


class ApprovableMixin(models.Model):

    approval_workflows = GenericRelation(
        'approval.ApprovalWorkflowInstance',
        content_type_field='content_type',
        object_id_field='object_id',
        related_query_name='%(app_label)s_%(class)s'
    )

    class Meta:
        abstract = True

    def get_approval_project(self):
        raise NotImplementedError("Subclasses must implement get_approval_project()")

    def get_approval_amount(self):
        raise NotImplementedError("Subclasses must implement get_approval_amount()")

    def on_approval_started(self, workflow_instance):
        raise NotImplementedError("Subclasses must implement on_approval_started()")

    def on_stage_approved(self, stage_instance):
        raise NotImplementedError("Subclasses must implement on_stage_approved()")

    def on_fully_approved(self, workflow_instance):
        raise NotImplementedError("Subclasses must implement on_fully_approved()")

    def on_rejected(self, workflow_instance, stage_instance=None):
        raise NotImplementedError("Subclasses must implement on_rejected()")

    def on_cancelled(self, workflow_instance, reason=None):
        raise NotImplementedError("Subclasses must implement on_cancelled()")

    def get_active_workflow(self):
        return self.approval_workflows.filter(
            status__in=['pending', 'in_progress']
        ).order_by('-started_at', '-id').first()

    def get_latest_workflow(self):
        return self.approval_workflows.order_by('-started_at', '-id').first()

    def get_workflow_status(self):
        """'no_workflow', 'pending', 'in_progress', 'approved', 'rejected' or 'cancelled'."""
        workflow = self.get_latest_workflow()
        if not workflow:
            return 'no_workflow'
        return workflow.status

    def has_pending_approval(self):
        return self.approval_workflows.filter(
            status__in=['pending', 'in_progress']
        ).exists()

    def get_approved_levels(self):
        workflow = self.get_latest_workflow()
        if not workflow:
            return []
        return list(
            workflow.stage_instances.filter(status='completed', actions__action='approve')
            .values_list('approval_level', flat=True)
            .distinct()
            .order_by('approval_level')
        )

    def get_approval_history(self):
        """Every approval action across all workflows of this object, oldest first."""
        from core.approval.models import ApprovalAction

        return ApprovalAction.objects.filter(
            stage_instance__workflow_instance__in=self.approval_workflows.all()
        ).select_related('user', 'stage_instance').order_by('created_at', 'id')
