"""
Integration tests for the complete procurement chain over the API:

    MR -> RFQ -> quotes -> quote approval -> PR -> PR approval -> PO -> supplier
"""
from datetime import timedelta

from django.core import mail
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.audit.models import AuditLog
from core.base.test_utils import create_user
from core.user_accounts.models import UserRole


class ProcurementIntegrationTestCase(TestCase):
    """Users, authorization matrix, project and approved suppliers, all set up through the API."""

    def setUp(self):
        self.client = APIClient()
        self.admin = create_user(role=UserRole.ADMIN)
        self.buyer = create_user(role=UserRole.PROCUREMENT)
        self.approver = create_user(role=UserRole.APPROVER)
        self.engineer = create_user(role=UserRole.REQUESTER)

        self.as_user(self.admin)
        response = self.client.put(reverse('approval:authorization-matrix'), {'matrix': [
            {'approval_level': 1, 'threshold_min': '0', 'approver_role': 'approver'},
            {'approval_level': 2, 'threshold_min': '10000', 'approver_role': 'admin'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.as_user(self.buyer)
        response = self.client.post(reverse('projects:project-list'), {'name': 'Marina Tower', 'code': 'MT-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.project_id = response.data['data']['id']

        self.cheap_id = self.register_supplier('Gulf Rebar', 'sales@gulfrebar.example.com')
        self.dear_id = self.register_supplier('Premium Steel', 'bids@premium.example.com')

    def as_user(self, user):
        self.client.force_authenticate(user=user)

    def register_supplier(self, name, email):
        response = self.client.post(
            reverse('suppliers:supplier-list'), {'name': name, 'email': email, 'category': 'Steel'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        supplier_id = response.data['data']['id']
        response = self.client.post(reverse('suppliers:supplier-approve', args=[supplier_id]), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return supplier_id

    def raise_material_request(self):
        self.as_user(self.engineer)
        response = self.client.post(reverse('material_requests:mr-list'), {
            'project_id': self.project_id,
            'remarks': 'Podium slab',
            'line_items': [
                {'item_code': 'REBAR-16', 'description': '16mm rebar', 'uom': 'TON', 'quantity': '100'},
                {'item_code': 'CEM-50', 'description': 'OPC cement 50kg', 'uom': 'BAG', 'quantity': '200'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['data']

    def quote(self, rfq_id, supplier_id, line_ids, prices, lead_time_days):
        response = self.client.post(reverse('quotes:quote-list'), {
            'rfq_id': rfq_id,
            'supplier_id': supplier_id,
            'valid_until': (timezone.localdate() + timedelta(days=30)).isoformat(),
            'line_items': [
                {'mr_line_item_id': line_id, 'unit_price': price, 'quantity': quantity, 'lead_time_days': lead_time_days}
                for (line_id, quantity), price in zip(line_ids, prices)
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['data']['id']

    def approved_quote_approval(self):
        """Run MR -> RFQ -> quotes -> approval; the cheaper supplier wins both lines."""
        material_request = self.raise_material_request()
        lines = [(line['id'], line['quantity']) for line in material_request['line_items']]

        self.as_user(self.buyer)
        response = self.client.post(reverse('rfq:rfq-list'), {
            'material_request_id': material_request['id'],
            'supplier_ids': [self.cheap_id, self.dear_id],
            'due_date': (timezone.localdate() + timedelta(days=7)).isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        rfq_id = response.data['data']['id']

        mail.outbox = []
        response = self.client.post(reverse('rfq:rfq-dispatch', args=[rfq_id]), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 2)

        cheap_quote = self.quote(rfq_id, self.cheap_id, lines, ['100.00', '50.00'], 5)
        self.quote(rfq_id, self.dear_id, lines, ['120.00', '55.00'], 3)

        response = self.client.get(reverse('rfq:rfq-comparison', args=[rfq_id]))
        self.assertEqual(response.data['data']['total_savings'], '3000.00')

        response = self.client.post(reverse('quotes:quote-approval-list'), {'rfq_id': rfq_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        approval_id = response.data['data']['id']
        self.assertEqual(response.data['data']['quote_pack']['comparison_data']['risk_assessment'], 'Low')

        self.as_user(self.engineer)
        response = self.client.post(reverse('quotes:quote-approval-decision', args=[approval_id]), {
            'decision': 'approved',
            'comments': 'Cheapest on both lines',
            'line_item_decisions': [
                {'mr_line_item_id': line_id, 'selected_quote_id': cheap_quote} for line_id, _ in lines
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return approval_id, material_request['id'], rfq_id

    def generate_pr(self, approval_id):
        self.as_user(self.buyer)
        response = self.client.post(
            reverse('pr:pr-list'), {'quote_approval_id': approval_id, 'project_id': self.project_id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['data']), 1)
        return response.data['data'][0]


class FullProcurementFlowTests(ProcurementIntegrationTestCase):

    def test_material_request_to_acknowledged_po(self):
        approval_id, mr_id, rfq_id = self.approved_quote_approval()

        response = self.client.get(reverse('material_requests:mr-detail', args=[mr_id]))
        self.assertEqual(response.data['data']['status'], 'approved')
        response = self.client.get(reverse('rfq:rfq-detail', args=[rfq_id]))
        self.assertEqual(response.data['data']['status'], 'approved')

        # 100 x 100 + 200 x 50
        pr = self.generate_pr(approval_id)
        self.assertEqual(pr['total_value'], '20000.00')
        self.assertEqual(pr['supplier'], self.cheap_id)
        self.assertEqual(pr['status'], 'draft')

        response = self.client.post(reverse('pr:pr-submit', args=[pr['id']]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'submitted')

        self.as_user(self.approver)
        response = self.client.get(reverse('pr:pr-pending-approvals'))
        self.assertEqual([row['id'] for row in response.data['data']['results']], [pr['id']])

        response = self.client.post(reverse('pr:pr-approve', args=[pr['id']]), {'comments': 'Within budget'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'under_review')

        self.as_user(self.admin)
        response = self.client.post(reverse('pr:pr-approve', args=[pr['id']]), {'comments': 'OK'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'approved')

        response = self.client.get(reverse('pr:pr-approvals', args=[pr['id']]))
        self.assertEqual(
            [(row['approval_level'], row['action']) for row in response.data['data']['approvals']],
            [(1, 'approve'), (2, 'approve')]
        )
        self.assertEqual(response.data['data']['next_level'], 0)

        self.as_user(self.buyer)
        response = self.client.post(reverse('po:po-list'), {
            'pr_id': pr['id'], 'project_id': self.project_id, 'delivery_address': 'Gate 3, Marina Tower',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        po = response.data['data'][0]
        self.assertEqual(po['status'], 'draft')
        self.assertEqual(po['total_value'], '20000.00')
        self.assertEqual(po['delivery_date'], (timezone.localdate() + timedelta(days=5)).isoformat())

        mail.outbox = []
        response = self.client.post(reverse('po:po-send', args=[po['id']]), {'message': 'Please confirm'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'sent')
        self.assertEqual(mail.outbox[0].to[0], 'sales@gulfrebar.example.com')

        response = self.client.post(reverse('po:po-acknowledge', args=[po['id']]), {
            'acknowledged_by': 'Omar (Gulf Rebar)',
            'acknowledgment_date': timezone.now().isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'acknowledged')

        for next_status in ('in_progress', 'delivered'):
            response = self.client.patch(reverse('po:po-detail', args=[po['id']]), {'status': next_status}, format='json')
            self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(reverse('po:po-history', args=[po['id']]))
        self.assertEqual(
            [row['status'] for row in response.data['data']],
            ['draft', 'sent', 'acknowledged', 'in_progress', 'delivered']
        )

        actions = set(AuditLog.objects.values_list('action', flat=True))
        self.assertTrue({
            'mr_created', 'rfq_created', 'rfq_dispatched', 'quote_submitted', 'approval_created',
            'approval_approved', 'pr_created', 'pr_submitted', 'pr_approved', 'po_generation_triggered',
            'po_created', 'po_sent_to_supplier', 'po_acknowledged_by_supplier', 'po_updated',
        } <= actions)

    def test_rejected_pr_returns_to_procurement(self):
        approval_id, _, _ = self.approved_quote_approval()
        pr = self.generate_pr(approval_id)
        self.client.post(reverse('pr:pr-submit', args=[pr['id']]))

        self.as_user(self.approver)
        response = self.client.post(reverse('pr:pr-reject', args=[pr['id']]), {'reason': 'Re-tender cement'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'rejected')
        self.assertEqual(response.data['data']['rejection_reason'], 'Re-tender cement')
        self.assertTrue(
            AuditLog.objects.filter(entity_id=pr['id'], action='returned_to_procurement', actor__isnull=True).exists()
        )

        self.as_user(self.buyer)
        response = self.client.post(reverse('po:po-list'), {'pr_id': pr['id'], 'project_id': self.project_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requester_cannot_skip_steps(self):
        approval_id, _, _ = self.approved_quote_approval()

        self.as_user(self.engineer)
        response = self.client.post(
            reverse('pr:pr-list'), {'quote_approval_id': approval_id, 'project_id': self.project_id}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
