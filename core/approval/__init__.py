"""
Authorization-matrix driven approval workflows.

Usage:
    from core.approval.managers import ApprovalManager
    from core.approval.mixins import ApprovableMixin

    class PurchaseRequisition(ApprovableMixin, models.Model):
        def get_approval_project(self):
            return self.project

        def get_approval_amount(self):
            return self.total_value

        def on_approval_started(self, workflow_instance): ...
        def on_stage_approved(self, stage_instance): ...
        def on_fully_approved(self, workflow_instance): ...
        def on_rejected(self, workflow_instance, stage_instance=None): ...
        def on_cancelled(self, workflow_instance, reason=None): ...

    ApprovalManager.start_workflow(pr)
    ApprovalManager.process_action(pr, user, 'approve', comment='OK')

Models and managers are not imported here to avoid AppRegistryNotReady.
"""
