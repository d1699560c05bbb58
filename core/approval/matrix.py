"""
Authorization matrix resolution.

Rules for the sample project:

    level  threshold          role
    1      0      - 5,000     procurement
    2      5,000  - 25,000    approver
    3      25,000 - 100,000   admin

An amount needs every level from 1 up to the highest level whose band
contains it: 10,000 needs levels 1 and 2, in that order.
"""
from decimal import Decimal

from core.approval.models import AuthorizationMatrix


def get_matrix_rules(project):
    """Active rules of the project, or the default rules when it has none."""
    rules = AuthorizationMatrix.objects.filter(is_active=True)
    if project is not None:
        project_rules = rules.filter(project=project)
        if project_rules.exists():
            return project_rules
    return rules.filter(project__isnull=True)


def get_required_levels(project, amount):
    """Sorted distinct levels whose band contains ``amount``."""
    amount = Decimal(amount)
    return sorted({rule.approval_level for rule in get_matrix_rules(project) if rule.applies_to(amount)})


def next_level_after(max_required, approved_levels):
    """0 when nothing (more) is required, otherwise the next level to approve."""
    if max_required == 0:
        return 0
    max_completed = max(approved_levels) if approved_levels else 0
    if max_completed >= max_required:
        return 0
    return max_completed + 1


def get_next_approval_level(project, amount, approved_levels):
    required = get_required_levels(project, amount)
    return next_level_after(max(required) if required else 0, approved_levels)


def is_fully_approved(project, amount, approved_levels):
    required = get_required_levels(project, amount)
    if not required:
        return True
    max_approved = max(approved_levels) if approved_levels else 0
    return max_approved >= max(required)


def get_approvers_for_level(project, level):
    """(roles, user ids) allowed to approve ``level`` regardless of amount."""
    rules = get_matrix_rules(project).filter(approval_level=level)
    roles = sorted({rule.approver_role for rule in rules})
    user_ids = sorted({rule.approver_user_id for rule in rules if rule.approver_user_id})
    return roles, user_ids
