"""
Tests for material request endpoints.

- GET/POST /procurement/mr/
- GET      /procurement/mr/{id}/
"""
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.audit.models import AuditLog
from core.base.models import generate_document_number
from core.base.test_utils import create_project, create_user
from procurement.material_requests.models import MaterialRequest
from procurement.tests.fixtures import create_material_request


def _line(**overrides):
    line = {'item_code': 'REBAR-16', 'description': '16mm rebar', 'uom': 'TON', 'quantity': '12.5'}
    line.update(overrides)
    return line


class MaterialRequestCreateTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = create_user()
        self.client.force_authenticate(user=self.user)
        self.project = create_project()
        self.url = reverse('material_requests:mr-list')

    def test_create_with_lines_and_attachments(self):
        response = self.client.post(self.url, {
            'project_id': self.project.pk,
            'remarks': 'Level 3 slab',
            'line_items': [_line(), _line(item_code='CEM-50', uom='BAG', quantity='200')],
            'attachments': [
                'https://files.example.com/drawings/slab.pdf',
                {'url': 'https://files.example.com/boq.xlsx', 'filename': 'BOQ.xlsx', 'file_size': 2048},
            ],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertTrue(data['mrn'].startswith('MR-'))
        self.assertEqual(data['status'], MaterialRequest.STATUS_SUBMITTED)
        self.assertEqual(data['requester'], self.user.pk)
        self.assertEqual(len(data['line_items']), 2)
        self.assertEqual(
            [attachment['filename'] for attachment in data['attachments']], ['slab.pdf', 'BOQ.xlsx']
        )
        self.assertTrue(AuditLog.objects.filter(entity_id=data['id'], action='mr_created').exists())

    def test_sequential_numbers(self):
        first = create_material_request(project=self.project)
        second = create_material_request(project=self.project)

        self.assertEqual(int(second.mrn.split('-')[-1]), int(first.mrn.split('-')[-1]) + 1)

    def test_numbering_continues_past_999(self):
        year = timezone.now().year
        first = create_material_request(project=self.project)
        second = create_material_request(project=self.project)
        MaterialRequest.objects.filter(pk=first.pk).update(mrn=f'MR-{year}-999')
        MaterialRequest.objects.filter(pk=second.pk).update(mrn=f'MR-{year}-1000')

        third = create_material_request(project=self.project)

        self.assertEqual(third.mrn, f'MR-{year}-1001')
        self.assertEqual(generate_document_number(MaterialRequest, 'mrn', 'MR'), f'MR-{year}-1002')

    def test_line_items_required(self):
        response = self.client.post(
            self.url, {'project_id': self.project.pk, 'line_items': []}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('line_items', response.data['data'])
        self.assertFalse(MaterialRequest.objects.exists())

    def test_quantity_must_be_positive(self):
        response = self.client.post(
            self.url, {'project_id': self.project.pk, 'line_items': [_line(quantity='0')]}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Quantity must be greater than 0', str(response.data['data']))

    def test_unknown_project(self):
        response = self.client.post(self.url, {'project_id': 9999, 'line_items': [_line()]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('project_id', response.data['data'])

    def test_unauthenticated(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class MaterialRequestListTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user())
        self.project = create_project()
        self.requester = create_user()
        self.mine = create_material_request(project=self.project, requester=self.requester)
        self.other = create_material_request(status=MaterialRequest.STATUS_APPROVED)

    def _ids(self, params):
        response = self.client.get(reverse('material_requests:mr-list'), params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return [row['id'] for row in response.data['data']['results']]

    def test_list_all(self):
        self.assertEqual(sorted(self._ids({})), sorted([self.mine.pk, self.other.pk]))

    def test_filters(self):
        self.assertEqual(self._ids({'project_id': self.project.pk}), [self.mine.pk])
        self.assertEqual(self._ids({'status': 'approved'}), [self.other.pk])
        self.assertEqual(self._ids({'requester_id': self.requester.pk}), [self.mine.pk])

    def test_line_item_count(self):
        response = self.client.get(reverse('material_requests:mr-list'), {'project_id': self.project.pk})

        self.assertEqual(response.data['data']['results'][0]['line_item_count'], 2)


class MaterialRequestDetailTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user())

    def test_detail(self):
        material_request = create_material_request()

        response = self.client.get(reverse('material_requests:mr-detail', args=[material_request.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['mrn'], material_request.mrn)
        self.assertEqual(
            [line['item_code'] for line in response.data['data']['line_items']], ['STEEL-12', 'CEMENT-50']
        )

    def test_missing(self):
        response = self.client.get(reverse('material_requests:mr-detail', args=[9999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class MaterialRequestStatusTests(TestCase):

    def test_mark_approved_is_idempotent(self):
        material_request = create_material_request()

        material_request.mark_approved()
        material_request.mark_approved()

        self.assertEqual(material_request.status, MaterialRequest.STATUS_APPROVED)

    def test_cannot_approve_draft(self):
        from django.core.exceptions import ValidationError

        material_request = create_material_request(status=MaterialRequest.STATUS_DRAFT)

        with self.assertRaises(ValidationError):
            material_request.mark_approved()
