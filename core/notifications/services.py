"""
Notification Service - email templates for procurement events

Each public method builds a NotificationTemplate (subject, body, recipients)
and hands it to Django's mail framework. Recipients are either the people
holding a role (approvers of a PR level) or the shared mailbox configured for
that role in settings.PROCUREMENT['NOTIFICATION_MAILBOXES'].
"""
import logging
import textwrap
from dataclasses import dataclass, field
from typing import List

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

from core.base.config import mailbox_for, procurement_setting

logger = logging.getLogger(__name__)


@dataclass
class NotificationTemplate:
    subject: str
    body: str
    recipients: List[str] = field(default_factory=list)

    def unique_recipients(self):
        seen = []
        for address in self.recipients:
            if address and address not in seen:
                seen.append(address)
        return seen


def _money(value):
    return f"{value:,.2f}"


def _text(body):
    return textwrap.dedent(body).strip() + "\n"


class NotificationService:

    # ==================== RECIPIENTS ====================

    @staticmethod
    def recipients_for_roles(roles, users=None):
        """
        Active users holding one of ``roles`` plus explicitly named users.

        Falls back to the role mailboxes when nobody holds the role.
        """
        User = get_user_model()
        emails = list(
            User.objects.filter(role__in=roles, is_active=True)
            .order_by('email')
            .values_list('email', flat=True)
        )
        for user in users or []:
            if user is not None and user.email not in emails:
                emails.append(user.email)
        if not emails:
            emails = [mailbox_for(role) for role in roles]
        return emails

    # ==================== PURCHASE REQUISITIONS ====================

    @classmethod
    def send_pr_created(cls, pr):
        return cls._send(NotificationTemplate(
            subject=f"New Purchase Requisition Created: {pr.pr_number}",
            body=_text(f"""
                A new Purchase Requisition has been created:

                PR Number: {pr.pr_number}
                Project: {pr.project.name}
                Supplier: {pr.supplier.name}
                Total Value: {_money(pr.total_value)} {pr.currency}
                Status: {pr.status}

                Please review and take necessary action.
            """),
            recipients=[mailbox_for('procurement'), mailbox_for('approver')],
        ))

    @classmethod
    def send_pr_status_change(cls, pr, old_status):
        return cls._send(NotificationTemplate(
            subject=f"Purchase Requisition Status Changed: {pr.pr_number}",
            body=_text(f"""
                Purchase Requisition status has been updated:

                PR Number: {pr.pr_number}
                Project: {pr.project.name}
                Supplier: {pr.supplier.name}
                Previous Status: {old_status}
                New Status: {pr.status}
                Total Value: {_money(pr.total_value)} {pr.currency}
            """),
            recipients=[mailbox_for('procurement'), mailbox_for('approver')],
        ))

    @classmethod
    def send_pr_approval_required(cls, pr, level, roles, users=None):
        return cls._send(NotificationTemplate(
            subject=f"Purchase Requisition Approval Required: {pr.pr_number}",
            body=_text(f"""
                A Purchase Requisition requires your approval:

                PR Number: {pr.pr_number}
                Project: {pr.project.name}
                Supplier: {pr.supplier.name}
                Total Value: {_money(pr.total_value)} {pr.currency}
                Approval Level: {level}
                Status: {pr.status}

                Please review and approve or reject this PR.
            """),
            recipients=cls.recipients_for_roles(roles, users),
        ))

    @classmethod
    def send_pr_approval_decision(cls, pr, decision, approver, comments=''):
        return cls._send(NotificationTemplate(
            subject=f"Purchase Requisition Approval Decision: {pr.pr_number}",
            body=_text(f"""
                Purchase Requisition approval decision:

                PR Number: {pr.pr_number}
                Project: {pr.project.name}
                Supplier: {pr.supplier.name}
                Decision: {decision}
                Approver: {approver.name if approver else 'SYSTEM'}
                Comments: {comments or 'None'}

                The PR has been {decision}.
            """),
            recipients=[mailbox_for('procurement'), pr.created_by.email if pr.created_by else mailbox_for('requester')],
        ))

    # ==================== PURCHASE ORDERS ====================

    @classmethod
    def send_po_created(cls, po):
        return cls._send(NotificationTemplate(
            subject=f"New Purchase Order Created: {po.po_number}",
            body=_text(f"""
                A new Purchase Order has been created:

                PO Number: {po.po_number}
                Project: {po.project.name}
                Supplier: {po.supplier.name}
                Total Value: {_money(po.total_value)} {po.currency}
                Status: {po.status}
                Delivery Address: {po.delivery_address}
                Payment Terms: {po.payment_terms}
            """),
            recipients=[mailbox_for('procurement')],
        ))

    @classmethod
    def send_po_status_change(cls, po, old_status):
        return cls._send(NotificationTemplate(
            subject=f"Purchase Order Status Changed: {po.po_number}",
            body=_text(f"""
                Purchase Order status has been updated:

                PO Number: {po.po_number}
                Project: {po.project.name}
                Supplier: {po.supplier.name}
                Previous Status: {old_status}
                New Status: {po.status}
                Total Value: {_money(po.total_value)} {po.currency}
            """),
            recipients=[mailbox_for('procurement'), po.supplier.email],
        ))

    @classmethod
    def send_po_sent_to_supplier(cls, po, message=''):
        return cls._send(NotificationTemplate(
            subject=f"Purchase Order Sent: {po.po_number}",
            body=_text(f"""
                Purchase Order has been sent to supplier:

                PO Number: {po.po_number}
                Project: {po.project.name}
                Supplier: {po.supplier.name}
                Total Value: {_money(po.total_value)} {po.currency}
                Delivery Address: {po.delivery_address}
                Payment Terms: {po.payment_terms}
                Message: {message or 'None'}

                Please acknowledge receipt and provide delivery timeline.
            """),
            recipients=[po.supplier_email or po.supplier.email, mailbox_for('procurement')],
        ))

    @classmethod
    def send_po_acknowledged(cls, po):
        return cls._send(NotificationTemplate(
            subject=f"Purchase Order Acknowledged: {po.po_number}",
            body=_text(f"""
                Purchase Order has been acknowledged by supplier:

                PO Number: {po.po_number}
                Project: {po.project.name}
                Supplier: {po.supplier.name}
                Acknowledged By: {po.acknowledged_by}
                Acknowledged At: {po.acknowledged_at.isoformat() if po.acknowledged_at else 'N/A'}
                Delivery Date: {po.delivery_date or 'TBD'}

                The supplier has confirmed receipt and is processing the order.
            """),
            recipients=[mailbox_for('procurement'), mailbox_for('project')],
        ))

    # ==================== SUPPLIERS ====================

    @classmethod
    def send_supplier_created(cls, supplier):
        return cls._send(NotificationTemplate(
            subject=f"New Supplier Registered: {supplier.name}",
            body=_text(f"""
                A new supplier has been registered and requires approval:

                Supplier Name: {supplier.name}
                Email: {supplier.email}
                Phone: {supplier.phone or 'N/A'}
                Category: {supplier.category}
                Address: {supplier.address or 'N/A'}
                Status: {supplier.status}
                Created By: {supplier.created_by.name if supplier.created_by else 'SYSTEM'}

                Please review and approve this supplier for active use.
            """),
            recipients=[mailbox_for('procurement'), mailbox_for('admin')],
        ))

    @classmethod
    def send_supplier_approved(cls, supplier):
        return cls._send(NotificationTemplate(
            subject=f"Supplier Approved: {supplier.name}",
            body=_text(f"""
                Supplier has been approved for active use:

                Supplier Name: {supplier.name}
                Email: {supplier.email}
                Category: {supplier.category}
                Approved By: {supplier.approved_by.name if supplier.approved_by else 'SYSTEM'}
                Approval Date: {supplier.approval_date.isoformat() if supplier.approval_date else 'N/A'}
                Approval Notes: {supplier.approval_notes or 'N/A'}

                The supplier is now available for procurement activities.
            """),
            recipients=[supplier.email, mailbox_for('procurement')],
        ))

    @classmethod
    def send_supplier_status_change(cls, supplier, old_status):
        return cls._send(NotificationTemplate(
            subject=f"Supplier Status Changed: {supplier.name}",
            body=_text(f"""
                Supplier status has been updated:

                Supplier Name: {supplier.name}
                Previous Status: {old_status}
                New Status: {supplier.status}
                Category: {supplier.category}
            """),
            recipients=[mailbox_for('procurement'), supplier.email],
        ))

    @classmethod
    def send_supplier_compliance_expiry(cls, supplier, expiring_documents):
        listing = "\n".join(
            f"- {doc.name} (expires {doc.expiry_date.isoformat()})" for doc in expiring_documents
        )
        body = (
            f"The following compliance documents for {supplier.name} are expiring soon:\n\n"
            f"{listing}\n\n"
            f"Supplier Details:\n"
            f"Name: {supplier.name}\n"
            f"Email: {supplier.email}\n"
            f"Category: {supplier.category}\n\n"
            f"Please contact the supplier to renew these documents.\n"
        )
        return cls._send(NotificationTemplate(
            subject=f"Compliance Documents Expiring: {supplier.name}",
            body=body,
            recipients=[mailbox_for('procurement'), mailbox_for('compliance')],
        ))

    # ==================== RFQ ====================

    @classmethod
    def send_rfq_dispatch(cls, rfq, invitation):
        material_request = rfq.material_request
        return cls._send(NotificationTemplate(
            subject=f"RFQ {rfq.rfq_number} Dispatched for {material_request.project.name}",
            body=_text(f"""
                Hello {invitation.supplier.name},

                You have been invited to quote for Material Request {material_request.mrn}.

                Project: {material_request.project.name}
                RFQ Number: {rfq.rfq_number}
                Line Items: {material_request.line_items.count()}
                Due Date: {rfq.due_date.isoformat() if rfq.due_date else 'Not specified'}
                Terms & Instructions: {rfq.terms or 'Standard procurement terms apply.'}
                Supplier Portal: {invitation.portal_link}

                Please review the request and respond before the due date.

                Best regards,
                Procurement Team
            """),
            recipients=[invitation.supplier.email, mailbox_for('procurement')],
        ))

    # ==================== DELIVERY ====================

    @staticmethod
    def _send(template):
        recipients = template.unique_recipients()
        if not recipients:
            logger.warning("Notification '%s' has no recipients, skipped", template.subject)
            return 0

        sent = send_mail(
            subject=template.subject,
            message=template.body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=recipients,
            fail_silently=procurement_setting('NOTIFICATIONS_FAIL_SILENTLY'),
        )
        logger.info("Notification '%s' sent to %s", template.subject, ", ".join(recipients))
        return sent
