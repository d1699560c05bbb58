"""
Tests for the error envelope produced by custom_exception_handler.
"""
from unittest.mock import patch

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.base.test_utils import create_user
from core.user_accounts.models import UserRole


class InvalidFilterTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user(role=UserRole.PROCUREMENT))

    def test_non_integer_id_filters_are_rejected(self):
        for url, params in (
            (reverse('pr:pr-list'), {'project_id': 'abc'}),
            (reverse('po:po-list'), {'pr_id': 'abc'}),
            (reverse('rfq:rfq-list'), {'material_request_id': 'abc'}),
            (reverse('quotes:quote-list'), {'supplier_id': 'abc'}),
            (reverse('material_requests:mr-list'), {'requester_id': 'abc'}),
            (reverse('audit:audit-log-list'), {'entity_id': 'abc'}),
            (reverse('approval:authorization-matrix'), {'project_id': 'abc'}),
        ):
            with self.subTest(url=url):
                response = self.client.get(url, params)

                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data['status'], 'error')
                self.assertIn(next(iter(params)), response.data['message'])

    def test_valid_filter_still_applies(self):
        response = self.client.get(reverse('pr:pr-list'), {'project_id': '9999'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 0)


class UnexpectedErrorTests(TestCase):

    def setUp(self):
        self.client = APIClient(raise_request_exception=False)
        self.client.force_authenticate(user=create_user(role=UserRole.PROCUREMENT))

    def test_unhandled_exception_returns_json_envelope(self):
        with patch('procurement.PR.views.PRListSerializer', side_effect=RuntimeError('database went away')):
            with self.assertLogs('procurement_hub.response_formatter', level='ERROR') as logs:
                response = self.client.get(reverse('pr:pr-list'))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response['Content-Type'], 'application/json')
        self.assertEqual(response.json(), {
            'status': 'error',
            'message': 'An unexpected error occurred',
            'data': None,
        })
        self.assertIn('database went away', '\n'.join(logs.output))
