"""
Tests for purchase requisition endpoints.

- GET/POST /procurement/pr/
- GET/PUT  /procurement/pr/{id}/
- POST     /procurement/pr/{id}/submit/ | approve/ | reject/
- GET      /procurement/pr/{id}/approvals/
- GET      /procurement/pr/pending-approvals/ | by-status/
"""
from decimal import Decimal

from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.approval.managers import ApprovalManager
from core.audit.models import AuditLog
from core.base.test_utils import create_matrix_rule, create_project, create_two_level_matrix, create_user
from core.user_accounts.models import UserRole
from procurement.PR.models import PurchaseRequisition
from procurement.po.models import PurchaseOrder
from procurement.quotes.models import QuoteApproval
from procurement.tests.fixtures import create_approved_quote_approval, create_draft_prs

# 100 x 100 + 200 x 50 = 20,000 with the cheap supplier: needs levels 1 and 2
LARGE_ORDER = [('STEEL-12', '100'), ('CEMENT-50', '200')]


class PRGenerateTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = create_user(role=UserRole.PROCUREMENT)
        self.client.force_authenticate(user=self.user)
        self.url = reverse('pr:pr-list')

    def _payload(self, approval):
        return {
            'quote_approval_id': approval.pk,
            'project_id': approval.rfq.material_request.project_id,
        }

    def test_generate_one_pr_per_supplier(self):
        approval, (cheap_quote, expensive_quote) = create_approved_quote_approval(split_suppliers=True)
        mail.outbox = []

        response = self.client.post(self.url, self._payload(approval), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['data']), 2)

        cheap_pr = PurchaseRequisition.objects.get(supplier=cheap_quote.supplier)
        self.assertEqual(cheap_pr.status, PurchaseRequisition.DRAFT)
        self.assertEqual(cheap_pr.quote_approval, approval)
        self.assertEqual(cheap_pr.created_by, self.user)
        # STEEL-12: 10 x 100.00
        self.assertEqual(cheap_pr.total_value, Decimal('1000.00'))

        expensive_pr = PurchaseRequisition.objects.get(supplier=expensive_quote.supplier)
        # CEMENT-50: 20 x 60.00
        self.assertEqual(expensive_pr.total_value, Decimal('1200.00'))
        line = expensive_pr.line_items.get()
        self.assertEqual(line.quantity, Decimal('20'))
        self.assertEqual(line.unit_price, Decimal('60.00'))
        self.assertEqual(line.lead_time_days, 10)

        self.assertEqual(
            AuditLog.objects.filter(entity_type='purchase_requisition', action='pr_created').count(), 2
        )
        self.assertEqual(len(mail.outbox), 2)

    def test_generate_single_supplier(self):
        approval, _ = create_approved_quote_approval()

        response = self.client.post(self.url, self._payload(approval), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        pr = PurchaseRequisition.objects.get()
        self.assertTrue(pr.pr_number.startswith('PR-'))
        self.assertEqual(pr.line_items.count(), 2)
        self.assertEqual(pr.total_value, Decimal('2000.00'))

    def test_generate_requires_both_ids(self):
        response = self.client.post(self.url, {'project_id': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quote_approval_id', response.data['data'])

    def test_generate_unknown_approval(self):
        project = create_project()

        response = self.client.post(self.url, {'quote_approval_id': 9999, 'project_id': project.pk}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_generate_from_pending_approval(self):
        approval, _ = create_approved_quote_approval()
        QuoteApproval.objects.filter(pk=approval.pk).update(status=QuoteApproval.STATUS_PENDING)

        response = self.client.post(self.url, self._payload(approval), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(PurchaseRequisition.objects.exists())

    def test_generate_project_mismatch(self):
        approval, _ = create_approved_quote_approval()
        other = create_project(name='Other')

        response = self.client.post(
            self.url, {'quote_approval_id': approval.pk, 'project_id': other.pk}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_generate_twice(self):
        approval, _ = create_approved_quote_approval()
        self.client.post(self.url, self._payload(approval), format='json')

        response = self.client.post(self.url, self._payload(approval), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(PurchaseRequisition.objects.count(), 1)

    def test_requester_cannot_generate(self):
        approval, _ = create_approved_quote_approval()
        self.client.force_authenticate(user=create_user(role=UserRole.REQUESTER))

        response = self.client.post(self.url, self._payload(approval), format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PRListDetailTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user(role=UserRole.PROCUREMENT))
        self.prs = create_draft_prs(split_suppliers=True)

    def test_list_filters(self):
        supplier = self.prs[0].supplier

        response = self.client.get(reverse('pr:pr-list'), {'supplier_id': supplier.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 1)
        self.assertEqual(response.data['data']['results'][0]['supplier_name'], supplier.name)

    def test_detail_includes_lines(self):
        pr = self.prs[0]

        response = self.client.get(reverse('pr:pr-detail', args=[pr.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['pr_number'], pr.pr_number)
        self.assertEqual(len(response.data['data']['line_items']), 1)
        self.assertEqual(response.data['data']['workflow_status'], 'no_workflow')

    def test_update_comments(self):
        pr = self.prs[0]

        response = self.client.put(
            reverse('pr:pr-detail', args=[pr.pk]), {'comments': 'Deliver to gate 2'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pr.refresh_from_db()
        self.assertEqual(pr.comments, 'Deliver to gate 2')
        self.assertTrue(AuditLog.objects.filter(entity_id=pr.pk, action='pr_updated').exists())

    def test_by_status(self):
        response = self.client.get(reverse('pr:pr-by-status'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], [{'status': 'draft', 'count': 2}])


class PRSubmitTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_user(role=UserRole.PROCUREMENT))
        create_two_level_matrix()
        self.approver = create_user(role=UserRole.APPROVER)
        self.pr = create_draft_prs()[0]
        mail.outbox = []

    def test_submit_starts_workflow(self):
        response = self.client.post(reverse('pr:pr-submit', args=[self.pr.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.pr.refresh_from_db()
        self.assertEqual(self.pr.status, PurchaseRequisition.SUBMITTED)
        self.assertIsNotNone(self.pr.submitted_at)
        self.assertEqual(ApprovalManager.get_next_level(self.pr), 1)

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('Approval Required', mail.outbox[0].subject)
        self.assertIn(self.approver.email, mail.outbox[0].to)

    def test_submit_twice(self):
        self.client.post(reverse('pr:pr-submit', args=[self.pr.pk]))

        response = self.client.post(reverse('pr:pr-submit', args=[self.pr.pk]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PRApproveTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        create_two_level_matrix()
        self.approver = create_user(role=UserRole.APPROVER)
        self.admin = create_user(role=UserRole.ADMIN)

    def _approve(self, pr, user, comments='Looks good'):
        self.client.force_authenticate(user=user)
        return self.client.post(reverse('pr:pr-approve', args=[pr.pk]), {'comments': comments}, format='json')

    def test_single_level_approval(self):
        pr = create_draft_prs()[0]

        response = self._approve(pr, self.approver)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pr.refresh_from_db()
        self.assertEqual(pr.status, PurchaseRequisition.APPROVED)
        self.assertEqual(pr.approved_by, self.approver)
        self.assertIsNotNone(pr.approved_at)

        actions = list(AuditLog.objects.filter(entity_id=pr.pk).values_list('action', flat=True))
        self.assertIn('pr_approved', actions)
        self.assertIn('po_generation_triggered', actions)
        self.assertFalse(PurchaseOrder.objects.exists())

    def test_two_levels_in_order(self):
        pr = create_draft_prs(lines=LARGE_ORDER)[0]
        self.assertEqual(pr.total_value, Decimal('20000.00'))

        response = self._approve(pr, self.approver)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pr.refresh_from_db()
        self.assertEqual(pr.status, PurchaseRequisition.UNDER_REVIEW)
        self.assertEqual(ApprovalManager.get_next_level(pr), 2)
        self.assertFalse(AuditLog.objects.filter(entity_id=pr.pk, action='po_generation_triggered').exists())

        # Level 2 is admin only
        response = self._approve(pr, self.approver)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self._approve(pr, self.admin)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pr.refresh_from_db()
        self.assertEqual(pr.status, PurchaseRequisition.APPROVED)
        self.assertEqual(pr.approved_by, self.admin)

    def test_requester_cannot_approve(self):
        pr = create_draft_prs()[0]

        response = self._approve(pr, create_user(role=UserRole.REQUESTER))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        pr.refresh_from_db()
        self.assertEqual(pr.status, PurchaseRequisition.DRAFT)

    def test_approve_completed_pr(self):
        pr = create_draft_prs()[0]
        self._approve(pr, self.approver)

        response = self._approve(pr, self.admin)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "No approval required or all approvals completed")

    def test_named_approver(self):
        pr = create_draft_prs(lines=LARGE_ORDER)[0]
        named = create_user(role=UserRole.REQUESTER)
        create_matrix_rule(2, '10000', None, UserRole.ADMIN, approver_user=named)
        self._approve(pr, self.approver)

        response = self._approve(pr, named)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pr.refresh_from_db()
        self.assertEqual(pr.status, PurchaseRequisition.APPROVED)

    @override_settings(PROCUREMENT={'AUTO_GENERATE_PO_ON_PR_APPROVAL': True})
    def test_full_approval_generates_pos(self):
        pr = create_draft_prs()[0]
        mail.outbox = []

        response = self._approve(pr, self.approver)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']['purchase_orders']), 1)
        po = PurchaseOrder.objects.get()
        self.assertEqual(po.purchase_requisition, pr)

        audit = AuditLog.objects.get(entity_type='purchase_order', entity_id=po.pk, action='po_created')
        self.assertEqual(audit.actor, self.approver)
        self.assertEqual(audit.after_data['pr_id'], pr.pk)
        self.assertTrue(any(po.po_number in message.subject for message in mail.outbox))


class PRNoMatrixTests(TestCase):

    def test_approve_without_rules_completes_immediately(self):
        client = APIClient()
        approver = create_user(role=UserRole.APPROVER)
        client.force_authenticate(user=approver)
        pr = create_draft_prs()[0]

        response = client.post(reverse('pr:pr-approve', args=[pr.pk]), {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pr.refresh_from_db()
        self.assertEqual(pr.status, PurchaseRequisition.APPROVED)
        self.assertEqual(pr.approved_by, approver)


class PRRejectTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        create_two_level_matrix()
        self.approver = create_user(role=UserRole.APPROVER)
        self.client.force_authenticate(user=self.approver)
        self.pr = create_draft_prs()[0]

    def _reject(self, payload):
        return self.client.post(reverse('pr:pr-reject', args=[self.pr.pk]), payload, format='json')

    def test_reason_required(self):
        response = self._reject({})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Rejection reason is required")

    def test_reject_submitted_pr(self):
        ApprovalManager.start_workflow(self.pr)

        response = self._reject({'reason': 'Over budget'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.pr.refresh_from_db()
        self.assertEqual(self.pr.status, PurchaseRequisition.REJECTED)
        self.assertEqual(self.pr.rejected_by, self.approver)
        self.assertEqual(self.pr.rejection_reason, 'Over budget')
        self.assertIsNotNone(self.pr.rejected_at)

        returned = AuditLog.objects.get(entity_id=self.pr.pk, action='returned_to_procurement')
        self.assertIsNone(returned.actor)
        self.assertEqual(returned.actor_name, 'SYSTEM')
        self.assertTrue(AuditLog.objects.filter(entity_id=self.pr.pk, action='pr_rejected').exists())

    def test_reject_draft_pr(self):
        response = self._reject({'reason': 'Wrong supplier'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.pr.refresh_from_db()
        self.assertEqual(self.pr.status, PurchaseRequisition.REJECTED)

    def test_requester_cannot_reject_draft(self):
        self.client.force_authenticate(user=create_user(role=UserRole.REQUESTER))

        response = self._reject({'reason': 'No'})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reject_rejected_pr(self):
        self._reject({'reason': 'First'})

        response = self._reject({'reason': 'Second'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PRApprovalHistoryTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        create_two_level_matrix()
        self.approver = create_user(role=UserRole.APPROVER)
        self.pr = create_draft_prs(lines=LARGE_ORDER)[0]

    def test_history_before_submission(self):
        self.client.force_authenticate(user=self.approver)

        response = self.client.get(reverse('pr:pr-approvals', args=[self.pr.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['approvals'], [])
        self.assertEqual(response.data['data']['next_level'], 0)
        self.assertEqual(response.data['data']['required_levels'], [1, 2])

    def test_history_after_first_level(self):
        ApprovalManager.start_workflow(self.pr)
        ApprovalManager.process_action(self.pr, self.approver, 'approve', 'Level one fine')
        self.client.force_authenticate(user=self.approver)

        response = self.client.get(reverse('pr:pr-approvals', args=[self.pr.pk]))

        data = response.data['data']
        self.assertEqual(data['next_level'], 2)
        self.assertEqual(data['required_levels'], [1, 2])
        self.assertEqual(len(data['approvals']), 1)
        record = data['approvals'][0]
        self.assertEqual(record['approval_level'], 1)
        self.assertEqual(record['approver_id'], self.approver.pk)
        self.assertEqual(record['action'], 'approve')
        self.assertEqual(record['comment'], 'Level one fine')

    def test_pending_approvals(self):
        ApprovalManager.start_workflow(self.pr)

        self.client.force_authenticate(user=self.approver)
        response = self.client.get(reverse('pr:pr-pending-approvals'))
        self.assertEqual(response.data['data']['count'], 1)

        self.client.force_authenticate(user=create_user(role=UserRole.REQUESTER))
        response = self.client.get(reverse('pr:pr-pending-approvals'))
        self.assertEqual(response.data['data']['count'], 0)
