"""
Builders shared by the test suites of every app.
"""
import itertools
from decimal import Decimal

from core.approval.models import AuthorizationMatrix
from core.user_accounts.models import CustomUser, UserRole
from procurement.projects.models import Project

_sequence = itertools.count(1)


def create_user(role=UserRole.REQUESTER, email=None, name=None, password='TestPass123!'):
    """Create an active user with the given role"""
    number = next(_sequence)
    return CustomUser.objects.create_user(
        email=email or f'{role}{number}@example.com',
        name=name or f'{str(role).title()} User {number}',
        password=password,
        role=role,
    )


def create_users():
    """One user per role, keyed by role name"""
    return {role: create_user(role=role) for role in UserRole.values}


def create_project(name='Tower A', code=None, created_by=None, members=None):
    project = Project.objects.create(
        name=name,
        code=code or f'PRJ-{next(_sequence):03d}',
        created_by=created_by,
    )
    if members:
        project.members.add(*members)
    return project


def create_matrix_rule(level, threshold_min='0', threshold_max=None, role=UserRole.APPROVER,
                       project=None, approver_user=None, is_active=True):
    return AuthorizationMatrix.objects.create(
        project=project,
        approval_level=level,
        threshold_min=Decimal(threshold_min),
        threshold_max=Decimal(threshold_max) if threshold_max is not None else None,
        approver_role=role,
        approver_user=approver_user,
        is_active=is_active,
    )


def create_two_level_matrix(project=None):
    """
    Default banded matrix used across the suites:

        0 - 10,000        level 1 (approver)
        10,000 - open     level 1 (approver) + level 2 (admin)
    """
    return [
        create_matrix_rule(1, '0', '10000', UserRole.APPROVER, project=project),
        create_matrix_rule(1, '10000', None, UserRole.APPROVER, project=project),
        create_matrix_rule(2, '10000', None, UserRole.ADMIN, project=project),
    ]
