"""
Tests for the user model and its manager.
"""
from django.test import TestCase

from core.user_accounts.models import CustomUser, UserRole


class CustomUserManagerTest(TestCase):
    """Test user creation through the manager"""

    def test_create_user_defaults_to_requester(self):
        user = CustomUser.objects.create_user(email='Site.Engineer@Example.com', name='Site Engineer', password='TestPass123!')

        self.assertEqual(user.role, UserRole.REQUESTER)
        self.assertEqual(user.email, 'Site.Engineer@example.com')
        self.assertTrue(user.check_password('TestPass123!'))
        self.assertTrue(user.is_active)

    def test_create_superuser_is_admin(self):
        user = CustomUser.objects.create_superuser(email='root@example.com', name='Root', password='TestPass123!')

        self.assertEqual(user.role, UserRole.ADMIN)
        self.assertTrue(user.is_admin())

    def test_email_and_name_required(self):
        with self.assertRaises(ValueError):
            CustomUser.objects.create_user(email='', name='No Email')
        with self.assertRaises(ValueError):
            CustomUser.objects.create_user(email='noname@example.com', name='')

    def test_invalid_role(self):
        with self.assertRaises(ValueError):
            CustomUser.objects.create_user(email='x@example.com', name='X', role='boss')


class RoleCheckTest(TestCase):
    """Test has_role, including the admin override"""

    def test_has_role(self):
        buyer = CustomUser.objects.create_user(email='buyer@example.com', name='Buyer', role=UserRole.PROCUREMENT)

        self.assertTrue(buyer.has_role(UserRole.PROCUREMENT))
        self.assertTrue(buyer.has_role(UserRole.APPROVER, UserRole.PROCUREMENT))
        self.assertFalse(buyer.has_role(UserRole.APPROVER))

    def test_admin_passes_every_check(self):
        admin = CustomUser.objects.create_user(email='admin@example.com', name='Admin', role=UserRole.ADMIN)

        self.assertTrue(admin.has_role(UserRole.REQUESTER))
        self.assertTrue(admin.has_role())
