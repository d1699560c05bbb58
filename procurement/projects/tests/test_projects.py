"""
Tests for project endpoints.

- GET/POST /procurement/projects/
- GET/PUT  /procurement/projects/{id}/
- POST     /procurement/projects/{id}/assign/
"""
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.audit.models import AuditLog
from core.base.test_utils import create_project, create_user
from core.user_accounts.models import UserRole
from procurement.projects.models import Project


class ProjectCreateTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = create_user(role=UserRole.PROCUREMENT)
        self.client.force_authenticate(user=self.user)
        self.url = reverse('projects:project-list')

    def test_create_project_success(self):
        response = self.client.post(self.url, {'name': 'Marina Tower', 'code': 'MT-01'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['code'], 'MT-01')
        self.assertEqual(response.data['data']['status'], 'active')

        project = Project.objects.get(code='MT-01')
        self.assertEqual(project.created_by, self.user)
        self.assertTrue(
            AuditLog.objects.filter(entity_type='project', entity_id=project.pk, action='project_created').exists()
        )

    def test_create_project_requires_name_and_code(self):
        response = self.client.post(self.url, {'description': 'No name'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data['data'])
        self.assertIn('code', response.data['data'])

    def test_create_project_duplicate_code(self):
        create_project(code='DUP-1')

        response = self.client.post(self.url, {'name': 'Other', 'code': 'dup-1'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requester_cannot_create_project(self):
        self.client.force_authenticate(user=create_user(role=UserRole.REQUESTER))

        response = self.client.post(self.url, {'name': 'X', 'code': 'X-1'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProjectListTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user())
        create_project(name='Alpha', code='A-1')
        done = create_project(name='Beta', code='B-1')
        done.status = Project.STATUS_COMPLETED
        done.save()

    def test_list_projects_paginated(self):
        response = self.client.get(reverse('projects:project-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 2)

    def test_filter_by_status(self):
        response = self.client.get(reverse('projects:project-list'), {'status': 'completed'})

        results = response.data['data']['results']
        self.assertEqual([row['code'] for row in results], ['B-1'])


class ProjectDetailTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user(role=UserRole.PROCUREMENT))
        self.project = create_project(name='Gamma', code='G-1')

    def test_get_project(self):
        response = self.client.get(reverse('projects:project-detail', args=[self.project.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['name'], 'Gamma')

    def test_get_missing_project(self):
        response = self.client.get(reverse('projects:project-detail', args=[9999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_project(self):
        response = self.client.put(
            reverse('projects:project-detail', args=[self.project.pk]),
            {'status': 'inactive', 'description': 'On hold'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.project.refresh_from_db()
        self.assertEqual(self.project.status, 'inactive')
        self.assertEqual(self.project.description, 'On hold')


class ProjectAssignTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user(role=UserRole.ADMIN))
        self.project = create_project()
        self.url = reverse('projects:project-assign', args=[self.project.pk])

    def test_assign_users(self):
        first, second = create_user(), create_user()

        response = self.client.post(self.url, {'user_ids': [first.pk, second.pk]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(set(self.project.members.values_list('pk', flat=True)), {first.pk, second.pk})
        self.assertTrue(AuditLog.objects.filter(action='project_members_assigned').exists())

    def test_assign_requires_user_ids(self):
        response = self.client.post(self.url, {'user_ids': []}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_unknown_user(self):
        response = self.client.post(self.url, {'user_ids': [424242]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('424242', str(response.data['data']))
