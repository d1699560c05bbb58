"""
Tests for purchase order endpoints.

- GET/POST /procurement/po/
- GET/PUT  /procurement/po/{id}/
- POST     /procurement/po/{id}/send/ | acknowledge/
- GET      /procurement/po/{id}/history/
- GET      /procurement/po/by-status/ | by-supplier/
"""
from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.audit.models import AuditLog
from core.base.test_utils import create_project, create_user
from core.user_accounts.models import UserRole
from procurement.po.models import POStatusHistory, PurchaseOrder
from procurement.tests.fixtures import create_approved_pr, create_draft_po, create_draft_prs


class POGenerateTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = create_user(role=UserRole.PROCUREMENT)
        self.client.force_authenticate(user=self.user)
        self.url = reverse('po:po-list')

    def test_generate_from_approved_pr(self):
        pr = create_approved_pr()
        mail.outbox = []

        response = self.client.post(
            self.url,
            {'pr_id': pr.pk, 'project_id': pr.project_id, 'delivery_address': 'Site gate 2'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['data']), 1)

        po = PurchaseOrder.objects.get()
        self.assertTrue(po.po_number.startswith('PO-'))
        self.assertEqual(po.status, PurchaseOrder.DRAFT)
        self.assertEqual(po.supplier, pr.supplier)
        self.assertEqual(po.total_value, Decimal('2000.00'))
        self.assertEqual(po.payment_terms, 'Net 30')
        self.assertEqual(po.delivery_address, 'Site gate 2')
        self.assertEqual(po.created_by, self.user)

        # Both lines quoted with a 5 day lead time
        expected = timezone.localdate() + timedelta(days=5)
        self.assertEqual(po.delivery_date, expected)
        self.assertEqual(set(po.line_items.values_list('delivery_date', flat=True)), {expected})

        history = po.status_history.get()
        self.assertEqual(history.status, PurchaseOrder.DRAFT)
        self.assertEqual(history.changed_by, self.user)

        self.assertTrue(AuditLog.objects.filter(entity_type='purchase_order', action='po_created').exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(po.po_number, mail.outbox[0].subject)

    def test_default_delivery_address(self):
        pr = create_approved_pr()

        self.client.post(self.url, {'pr_id': pr.pk, 'project_id': pr.project_id}, format='json')

        self.assertEqual(PurchaseOrder.objects.get().delivery_address, 'Main Warehouse')

    def test_generate_requires_ids(self):
        response = self.client.post(self.url, {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('pr_id', response.data['data'])
        self.assertIn('project_id', response.data['data'])

    def test_generate_from_draft_pr(self):
        pr = create_draft_prs()[0]

        response = self.client.post(self.url, {'pr_id': pr.pk, 'project_id': pr.project_id}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(PurchaseOrder.objects.exists())

    def test_generate_project_mismatch(self):
        pr = create_approved_pr()

        response = self.client.post(
            self.url, {'pr_id': pr.pk, 'project_id': create_project(name='Elsewhere').pk}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_generate_twice(self):
        pr = create_approved_pr()
        self.client.post(self.url, {'pr_id': pr.pk, 'project_id': pr.project_id}, format='json')

        response = self.client.post(self.url, {'pr_id': pr.pk, 'project_id': pr.project_id}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(PurchaseOrder.objects.count(), 1)

    def test_unknown_pr(self):
        response = self.client.post(self.url, {'pr_id': 9999, 'project_id': create_project().pk}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class POUpdateTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = create_user(role=UserRole.PROCUREMENT)
        self.client.force_authenticate(user=self.user)
        self.po = create_draft_po()
        self.url = reverse('po:po-detail', args=[self.po.pk])
        mail.outbox = []

    def test_get_po(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['po_number'], self.po.po_number)
        self.assertEqual(len(response.data['data']['line_items']), 2)
        self.assertEqual(len(response.data['data']['status_history']), 1)

    def test_allowed_transition(self):
        response = self.client.put(self.url, {'status': 'approved', 'comments': 'Checked'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.po.refresh_from_db()
        self.assertEqual(self.po.status, PurchaseOrder.APPROVED)
        self.assertEqual(self.po.comments, 'Checked')

        latest = self.po.status_history.last()
        self.assertEqual(latest.previous_status, PurchaseOrder.DRAFT)
        self.assertEqual(latest.status, PurchaseOrder.APPROVED)
        self.assertEqual(latest.changed_by, self.user)

        self.assertTrue(AuditLog.objects.filter(entity_id=self.po.pk, action='po_updated').exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('Status Changed', mail.outbox[0].subject)

    def test_disallowed_transition(self):
        response = self.client.put(self.url, {'status': 'delivered'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.po.refresh_from_db()
        self.assertEqual(self.po.status, PurchaseOrder.DRAFT)
        self.assertEqual(self.po.status_history.count(), 1)

    def test_update_delivery_date_only(self):
        new_date = timezone.localdate() + timedelta(days=40)

        response = self.client.put(self.url, {'delivery_date': new_date.isoformat()}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.po.refresh_from_db()
        self.assertEqual(self.po.delivery_date, new_date)
        self.assertEqual(mail.outbox, [])

    def test_empty_update(self):
        response = self.client.put(self.url, {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requester_cannot_update(self):
        self.client.force_authenticate(user=create_user(role=UserRole.REQUESTER))

        response = self.client.put(self.url, {'status': 'approved'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class POTransitionTests(TestCase):

    def setUp(self):
        self.po = create_draft_po()

    def test_full_lifecycle(self):
        for new_status in ('approved', 'sent', 'acknowledged', 'in_progress', 'delivered', 'invoiced', 'paid'):
            self.po.transition_to(new_status)

        self.assertEqual(self.po.status, PurchaseOrder.PAID)
        self.assertEqual(self.po.status_history.count(), 8)

    def test_terminal_statuses(self):
        self.po.transition_to('cancelled')

        self.assertFalse(self.po.can_transition_to('approved'))
        self.assertFalse(self.po.can_transition_to('draft'))

    def test_delivered_cannot_be_cancelled(self):
        for new_status in ('sent', 'acknowledged', 'delivered'):
            self.po.transition_to(new_status)

        self.assertFalse(self.po.can_transition_to('cancelled'))
        self.assertTrue(self.po.can_transition_to('invoiced'))


class POSendAcknowledgeTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = create_user(role=UserRole.PROCUREMENT)
        self.client.force_authenticate(user=self.user)
        self.po = create_draft_po()
        mail.outbox = []

    def _send(self, payload=None):
        return self.client.post(reverse('po:po-send', args=[self.po.pk]), payload or {}, format='json')

    def _acknowledge(self, payload):
        return self.client.post(reverse('po:po-acknowledge', args=[self.po.pk]), payload, format='json')

    def test_send_to_supplier(self):
        response = self._send({'supplier_email': 'orders@supplier.com', 'message': 'Please confirm'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], "PO sent to supplier successfully")

        self.po.refresh_from_db()
        self.assertEqual(self.po.status, PurchaseOrder.SENT)
        self.assertEqual(self.po.sent_by, self.user)
        self.assertIsNotNone(self.po.sent_at)
        self.assertEqual(self.po.supplier_email, 'orders@supplier.com')

        self.assertTrue(AuditLog.objects.filter(entity_id=self.po.pk, action='po_sent_to_supplier').exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('orders@supplier.com', mail.outbox[0].to)
        self.assertIn('Please confirm', mail.outbox[0].body)

    def test_send_defaults_to_supplier_email(self):
        self._send()

        self.po.refresh_from_db()
        self.assertEqual(self.po.supplier_email, self.po.supplier.email)

    def test_send_twice(self):
        self._send()

        response = self._send()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_acknowledge(self):
        self._send()
        delivery = timezone.localdate() + timedelta(days=21)

        response = self._acknowledge({
            'acknowledged_by': 'Omar (Cheap Steel)',
            'acknowledgment_date': timezone.now().isoformat(),
            'comments': 'Two batches',
            'estimated_delivery_date': delivery.isoformat(),
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.po.refresh_from_db()
        self.assertEqual(self.po.status, PurchaseOrder.ACKNOWLEDGED)
        self.assertEqual(self.po.acknowledged_by, 'Omar (Cheap Steel)')
        self.assertEqual(self.po.acknowledgment_comments, 'Two batches')
        self.assertEqual(self.po.delivery_date, delivery)
        self.assertTrue(
            AuditLog.objects.filter(entity_id=self.po.pk, action='po_acknowledged_by_supplier').exists()
        )

    def test_acknowledge_requires_fields(self):
        self._send()

        response = self._acknowledge({'comments': 'Missing name'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "acknowledged_by and acknowledgment_date are required")

    def test_acknowledge_unsent_po(self):
        response = self._acknowledge({
            'acknowledged_by': 'Omar',
            'acknowledgment_date': timezone.now().isoformat(),
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_history(self):
        self._send()

        response = self.client.get(reverse('po:po-history', args=[self.po.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['status'] for entry in response.data['data']], ['draft', 'sent'])
        self.assertEqual(POStatusHistory.objects.filter(purchase_order=self.po).count(), 2)


class POReportTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user())
        self.po = create_draft_po()
        second = create_draft_po()
        second.transition_to(PurchaseOrder.SENT)

    def test_by_status(self):
        response = self.client.get(reverse('po:po-by-status'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data['data'],
            [{'status': 'draft', 'count': 1}, {'status': 'sent', 'count': 1}]
        )

    def test_by_supplier(self):
        response = self.client.get(reverse('po:po-by-supplier'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 2)
        self.assertEqual(response.data['data'][0]['po_count'], 1)

    def test_list_filter_by_pr(self):
        response = self.client.get(reverse('po:po-list'), {'pr_id': self.po.purchase_requisition_id})

        self.assertEqual(response.data['data']['count'], 1)
        self.assertEqual(response.data['data']['results'][0]['po_number'], self.po.po_number)
