"""Approval workflow manager.

Drives the authorization-matrix approval of any model that uses
ApprovableMixin: one stage per level, levels approved strictly in order,
one approval by an eligible user completes a level.
"""
import logging

from django.contrib.contenttypes.models import ContentType
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from core.approval.matrix import get_approvers_for_level, get_required_levels, next_level_after
from core.approval.models import (
    ApprovalAction,
    ApprovalWorkflowInstance,
    ApprovalWorkflowStageInstance,
)

logger = logging.getLogger(__name__)


class ApprovalManager:
    """Central manager for matrix-driven approval workflows."""

    REQUIRED_METHODS = [
        'get_approval_project',
        'get_approval_amount',
        'on_approval_started',
        'on_stage_approved',
        'on_fully_approved',
        'on_rejected',
        'on_cancelled',
    ]

    # ----------------------
    # Helper Methods
    # ----------------------

    @staticmethod
    def _get_content_type(obj):
        return ContentType.objects.get_for_model(obj)

    @classmethod
    def _validate_approvable(cls, obj):
        for method_name in cls.REQUIRED_METHODS:
            if not callable(getattr(obj, method_name, None)):
                raise ValueError(
                    f"Object {obj.__class__.__name__} must implement {method_name}() method. "
                    f"Use ApprovableMixin and implement the approval hooks."
                )

    # ----------------------
    # Workflow Creation & Starting
    # ----------------------

    @classmethod
    def start_workflow(cls, obj) -> ApprovalWorkflowInstance:
        """Start approval for ``obj`` using the matrix rules of its project.

        With no level required the workflow is approved immediately.

        Raises:
            ValidationError: a workflow is already running for obj
        """
        cls._validate_approvable(obj)

        if cls.get_workflow_instance(obj):
            raise ValidationError(f"Approval already in progress for {obj}.")

        amount = obj.get_approval_amount()
        required = get_required_levels(obj.get_approval_project(), amount)
        max_required = max(required) if required else 0

        with transaction.atomic():
            instance = ApprovalWorkflowInstance.objects.create(
                content_type=cls._get_content_type(obj),
                object_id=obj.pk,
                amount=amount,
                required_levels=list(range(1, max_required + 1)),
                status=ApprovalWorkflowInstance.STATUS_PENDING,
            )
            logger.info(
                "Approval started for %s (amount %s, levels %s)", obj, amount, instance.required_levels
            )

            obj.on_approval_started(instance)
            instance = cls._activate_next_stage_internal(obj, instance)

        return instance

    @classmethod
    def cancel_workflow(cls, obj, reason=None):
        """Cancel the running workflow, if any. Finished workflows are returned unchanged."""
        instance = cls.get_workflow_instance(obj, active_only=False)

        if not instance:
            raise ValidationError("No approval workflow found to cancel.")

        if instance.is_finished:
            return instance

        with transaction.atomic():
            instance = ApprovalWorkflowInstance.objects.select_for_update().get(pk=instance.pk)
            now = timezone.now()

            instance.stage_instances.filter(
                status=ApprovalWorkflowStageInstance.STATUS_ACTIVE
            ).update(status=ApprovalWorkflowStageInstance.STATUS_CANCELLED, completed_at=now)

            instance.status = ApprovalWorkflowInstance.STATUS_CANCELLED
            instance.finished_at = now
            instance.current_level = 0
            instance.save(update_fields=["status", "finished_at", "current_level"])

            logger.info("Approval cancelled for %s: %s", obj, reason or 'no reason provided')
            obj.on_cancelled(instance, reason)

        return instance

    # ----------------------
    # Stage Activation
    # ----------------------

    @classmethod
    def _activate_next_stage_internal(cls, obj, instance):
        """Open the next level, or finish the workflow when none is left."""
        with transaction.atomic():
            instance = ApprovalWorkflowInstance.objects.select_for_update().get(pk=instance.pk)

            if instance.is_finished:
                return instance

            approved_levels = list(
                instance.stage_instances.filter(
                    status=ApprovalWorkflowStageInstance.STATUS_COMPLETED
                ).values_list("approval_level", flat=True)
            )
            next_level = next_level_after(instance.max_level, approved_levels)
            now = timezone.now()

            if next_level == 0:
                instance.status = ApprovalWorkflowInstance.STATUS_APPROVED
                instance.finished_at = now
                instance.current_level = 0
                instance.save(update_fields=["status", "finished_at", "current_level"])

                logger.info("Approval completed for %s", obj)
                obj.on_fully_approved(instance)
                return instance

            roles, user_ids = get_approvers_for_level(obj.get_approval_project(), next_level)
            ApprovalWorkflowStageInstance.objects.create(
                workflow_instance=instance,
                approval_level=next_level,
                required_roles=roles,
                approver_user_ids=user_ids,
                status=ApprovalWorkflowStageInstance.STATUS_ACTIVE,
                activated_at=now,
            )
            if not roles and not user_ids:
                logger.warning("No approver configured for level %s of %s; admins only", next_level, obj)

            instance.status = ApprovalWorkflowInstance.STATUS_IN_PROGRESS
            instance.current_level = next_level
            instance.save(update_fields=["status", "current_level"])

        return instance

    # ----------------------
    # User Actions
    # ----------------------

    @classmethod
    def process_action(cls, obj, user, action, comment=None) -> ApprovalWorkflowInstance:
        """Apply ``approve``, ``reject`` or ``comment`` from ``user`` to the open level.

        Raises:
            ValidationError: no open level, unknown action, repeated decision
            PermissionDenied: user cannot approve the open level
        """
        if action not in {
            ApprovalAction.ACTION_APPROVE,
            ApprovalAction.ACTION_REJECT,
            ApprovalAction.ACTION_COMMENT,
        }:
            raise ValidationError(f"Invalid action: {action}")

        instance = cls.get_workflow_instance(obj)
        if not instance:
            raise ValidationError("No approval required or all approvals completed")

        with transaction.atomic():
            instance = ApprovalWorkflowInstance.objects.select_for_update().get(pk=instance.pk)

            active_stage = instance.stage_instances.filter(
                status=ApprovalWorkflowStageInstance.STATUS_ACTIVE
            ).first()
            if not active_stage:
                raise ValidationError("No approval required or all approvals completed")

            if not active_stage.can_act(user):
                raise PermissionDenied(
                    f"User {user.email} ({user.role}) cannot act on approval level "
                    f"{active_stage.approval_level}; requires {', '.join(active_stage.required_roles) or 'admin'}."
                )

            if action != ApprovalAction.ACTION_COMMENT and active_stage.actions.filter(
                user=user,
                action__in=[ApprovalAction.ACTION_APPROVE, ApprovalAction.ACTION_REJECT],
            ).exists():
                raise ValidationError(f"User {user.email} already acted on level {active_stage.approval_level}.")

            ApprovalAction.objects.create(
                stage_instance=active_stage,
                user=user,
                action=action,
                comment=comment or '',
            )
            logger.info(
                "%s: %s on level %s of %s", user.email, action, active_stage.approval_level, obj
            )

            if action == ApprovalAction.ACTION_COMMENT:
                return instance

            now = timezone.now()
            active_stage.status = ApprovalWorkflowStageInstance.STATUS_COMPLETED
            active_stage.completed_at = now
            active_stage.save(update_fields=["status", "completed_at"])

            if action == ApprovalAction.ACTION_APPROVE:
                instance.completed_stage_count += 1
                instance.save(update_fields=["completed_stage_count"])
                obj.on_stage_approved(active_stage)
                return cls._activate_next_stage_internal(obj, instance)

            instance.status = ApprovalWorkflowInstance.STATUS_REJECTED
            instance.finished_at = now
            instance.current_level = 0
            instance.save(update_fields=["status", "finished_at", "current_level"])
            obj.on_rejected(instance, active_stage)

        return instance

    # ----------------------
    # Utility Methods
    # ----------------------

    @staticmethod
    def get_workflow_instance(obj, active_only=True):
        """Most recent workflow of obj; only pending/in-progress ones when active_only."""
        query = ApprovalWorkflowInstance.objects.filter(
            content_type=ContentType.objects.get_for_model(obj),
            object_id=obj.pk
        )
        if active_only:
            query = query.filter(status__in=ApprovalWorkflowInstance.ACTIVE_STATUSES)
        return query.order_by('-started_at', '-id').first()

    @classmethod
    def get_active_stage(cls, obj):
        instance = cls.get_workflow_instance(obj)
        if not instance:
            return None
        return instance.stage_instances.filter(
            status=ApprovalWorkflowStageInstance.STATUS_ACTIVE
        ).first()

    @classmethod
    def get_next_level(cls, obj):
        """Level waiting for approval, 0 when none."""
        stage = cls.get_active_stage(obj)
        return stage.approval_level if stage else 0

    @staticmethod
    def get_pending_approvals(user, model_class):
        """Objects of model_class whose open level ``user`` may approve."""
        stages = ApprovalWorkflowStageInstance.objects.filter(
            status=ApprovalWorkflowStageInstance.STATUS_ACTIVE,
            workflow_instance__status=ApprovalWorkflowInstance.STATUS_IN_PROGRESS,
            workflow_instance__content_type=ContentType.objects.get_for_model(model_class),
        ).select_related('workflow_instance')

        object_ids = [stage.workflow_instance.object_id for stage in stages if stage.can_act(user)]
        return model_class.objects.filter(pk__in=object_ids)
