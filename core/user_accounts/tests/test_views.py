"""
Tests for User Account API Views.
Covers JWT login, the own profile and admin user management.
"""
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from core.base.test_utils import create_user
from core.user_accounts.models import CustomUser, UserRole


class TokenAPITest(APITestCase):
    """Test the JWT token endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.user = create_user(email='buyer@example.com', role=UserRole.PROCUREMENT, password='TestPass123!')

    def test_obtain_and_use_token(self):
        response = self.client.post(
            reverse('token-obtain-pair'),
            {'email': 'buyer@example.com', 'password': 'TestPass123!'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        profile = self.client.get(reverse('accounts:current-user'))
        self.assertEqual(profile.status_code, status.HTTP_200_OK)
        self.assertEqual(profile.data['data']['role'], UserRole.PROCUREMENT)

    def test_wrong_password(self):
        response = self.client.post(
            reverse('token-obtain-pair'),
            {'email': 'buyer@example.com', 'password': 'wrong'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        response = self.client.post(
            reverse('token-obtain-pair'),
            {'email': 'buyer@example.com', 'password': 'TestPass123!'},
            format='json'
        )
        refreshed = self.client.post(reverse('token-refresh'), {'refresh': response.data['refresh']}, format='json')
        self.assertEqual(refreshed.status_code, status.HTTP_200_OK)
        self.assertIn('access', refreshed.data)


class CurrentUserAPITest(APITestCase):

    def test_profile(self):
        user = create_user(role=UserRole.APPROVER)
        self.client.force_authenticate(user=user)

        response = self.client.get(reverse('accounts:current-user'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['email'], user.email)
        self.assertEqual(response.data['data']['role_display'], 'Approver')

    def test_profile_requires_authentication(self):
        response = self.client.get(reverse('accounts:current-user'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AdminUserAPITest(APITestCase):
    """Test admin-only user management"""

    def setUp(self):
        self.admin = create_user(role=UserRole.ADMIN)
        self.client.force_authenticate(user=self.admin)
        self.url = reverse('accounts:user-list')

    def test_create_user(self):
        response = self.client.post(self.url, {
            'email': 'approver.one@example.com',
            'name': 'Approver One',
            'role': 'approver',
            'password': 'Str0ng-Passw0rd',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = CustomUser.objects.get(email='approver.one@example.com')
        self.assertEqual(user.role, UserRole.APPROVER)
        self.assertTrue(user.check_password('Str0ng-Passw0rd'))
        self.assertNotIn('password', response.data['data'])

    def test_create_duplicate_email(self):
        create_user(email='taken@example.com')

        response = self.client.post(self.url, {
            'email': 'TAKEN@example.com', 'name': 'Again', 'role': 'requester', 'password': 'Str0ng-Passw0rd',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['data'])

    def test_create_invalid_role(self):
        response = self.client.post(self.url, {
            'email': 'x@example.com', 'name': 'X', 'role': 'boss', 'password': 'Str0ng-Passw0rd',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data['data'])

    def test_list_filter_by_role(self):
        create_user(role=UserRole.PROCUREMENT)
        create_user(role=UserRole.REQUESTER)

        response = self.client.get(self.url, {'role': 'procurement'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            {row['role'] for row in response.data['data']['results']}, {UserRole.PROCUREMENT}
        )

    def test_update_role_and_deactivate(self):
        user = create_user()

        response = self.client.patch(
            reverse('accounts:user-detail', args=[user.pk]),
            {'role': 'approver', 'is_active': False},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.role, UserRole.APPROVER)
        self.assertFalse(user.is_active)

    def test_admin_cannot_demote_self(self):
        response = self.client.patch(
            reverse('accounts:user-detail', args=[self.admin.pk]), {'role': 'requester'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.role, UserRole.ADMIN)

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=create_user(role=UserRole.PROCUREMENT))

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('admin', response.data['message'])
