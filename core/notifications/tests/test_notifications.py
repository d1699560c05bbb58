"""
Tests for notification templates and recipient resolution.
"""
from django.core import mail
from django.test import TestCase, override_settings

from core.base.test_utils import create_user
from core.notifications.services import NotificationService, NotificationTemplate
from core.user_accounts.models import UserRole
from procurement.tests.fixtures import create_draft_po, create_draft_prs, create_supplier


class RecipientTests(TestCase):

    def test_role_holders_and_named_users(self):
        first = create_user(role=UserRole.APPROVER, email='b-approver@example.com')
        second = create_user(role=UserRole.APPROVER, email='a-approver@example.com')
        inactive = create_user(role=UserRole.APPROVER, email='gone@example.com')
        inactive.is_active = False
        inactive.save()
        named = create_user(role=UserRole.REQUESTER)

        emails = NotificationService.recipients_for_roles([UserRole.APPROVER], [named, first])

        self.assertEqual(emails, [second.email, first.email, named.email])

    def test_falls_back_to_mailboxes(self):
        emails = NotificationService.recipients_for_roles(['approver'])

        self.assertEqual(emails, ['approver@company.com'])

    def test_unique_recipients_keep_order(self):
        template = NotificationTemplate('s', 'b', ['x@example.com', '', 'y@example.com', 'x@example.com'])

        self.assertEqual(template.unique_recipients(), ['x@example.com', 'y@example.com'])


class TemplateTests(TestCase):

    def test_pr_created(self):
        pr = create_draft_prs()[0]
        mail.outbox = []

        NotificationService.send_pr_created(pr)

        message = mail.outbox[0]
        self.assertEqual(message.subject, f"New Purchase Requisition Created: {pr.pr_number}")
        self.assertIn('Total Value: 2,000.00 AED', message.body)
        self.assertEqual(message.to, ['procurement@company.com', 'approver@company.com'])

    def test_pr_approval_decision_by_system(self):
        pr = create_draft_prs()[0]
        mail.outbox = []

        NotificationService.send_pr_approval_decision(pr, 'rejected', None)

        self.assertIn('Approver: SYSTEM', mail.outbox[0].body)
        self.assertIn('Comments: None', mail.outbox[0].body)

    def test_po_sent_uses_override_address(self):
        po = create_draft_po()
        po.supplier_email = 'orders@supplier.example.com'
        mail.outbox = []

        NotificationService.send_po_sent_to_supplier(po, 'Please confirm')

        self.assertEqual(mail.outbox[0].to[0], 'orders@supplier.example.com')
        self.assertIn('Message: Please confirm', mail.outbox[0].body)

    @override_settings(PROCUREMENT={'NOTIFICATION_MAILBOXES': {'procurement': 'buyers@site.example.com'}})
    def test_mailbox_fallback_to_procurement(self):
        supplier = create_supplier()

        NotificationService.send_supplier_created(supplier)

        self.assertEqual(mail.outbox[0].to, ['buyers@site.example.com'])

    def test_no_recipients_is_skipped(self):
        sent = NotificationService._send(NotificationTemplate('Nobody', 'body', []))

        self.assertEqual(sent, 0)
        self.assertEqual(mail.outbox, [])
