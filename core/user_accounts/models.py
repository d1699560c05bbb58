"""
User Account Models

Users log in with their email address. The role decides which procurement
steps a user may perform and which authorization-matrix levels they approve.
"""
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.db import models
from django.utils import timezone


class UserRole(models.TextChoices):
    REQUESTER = 'requester', 'Requester'
    PROCUREMENT = 'procurement', 'Procurement'
    APPROVER = 'approver', 'Approver'
    ADMIN = 'admin', 'Admin'


class CustomUserManager(BaseUserManager):
    """
    Creates users with a procurement role.
    """

    def create_user(self, email, name, phone_number='', password=None, role=UserRole.REQUESTER, **extra_fields):
        """
        Create and save a user.

        Args:
            email: login identifier
            name: full name
            phone_number: optional contact number
            password: raw password (hashed before saving)
            role: one of UserRole
        """
        if not email:
            raise ValueError('Email is required')
        if not name:
            raise ValueError('Name is required')
        if role not in UserRole.values:
            raise ValueError(f"Invalid role '{role}'")

        user = self.model(
            email=self.normalize_email(email),
            name=name,
            phone_number=phone_number,
            role=role,
            **extra_fields
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, name, phone_number='', password=None, **extra_fields):
        """Used by the createsuperuser management command."""
        return self.create_user(
            email=email,
            name=name,
            phone_number=phone_number,
            password=password,
            role=UserRole.ADMIN,
            **extra_fields
        )


class CustomUser(AbstractBaseUser):
    """Email-authenticated user with a procurement role"""
    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=20, blank=True, default='')
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.REQUESTER,
        db_index=True
    )
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        db_table = 'custom_users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.email})"

    def is_admin(self):
        return self.role == UserRole.ADMIN

    def has_role(self, *roles):
        """Admins pass every role check."""
        return self.is_admin() or self.role in roles
