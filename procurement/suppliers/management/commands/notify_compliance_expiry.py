"""
Email the procurement and compliance mailboxes about supplier compliance
documents that expire soon.

Usage: python manage.py notify_compliance_expiry [--days 30]
"""
from django.core.management.base import BaseCommand
from django.utils import timezone

from core.base.config import procurement_setting
from core.notifications.services import NotificationService
from procurement.suppliers.models import ComplianceDocument, Supplier


class Command(BaseCommand):
    help = 'Notifies about supplier compliance documents expiring within N days'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=None,
            help='Look-ahead window in days (default: COMPLIANCE_EXPIRY_WARNING_DAYS)',
        )

    def handle(self, *args, **options):
        days = options['days']
        if days is None:
            days = procurement_setting('COMPLIANCE_EXPIRY_WARNING_DAYS')
        today = timezone.localdate()

        expiring = ComplianceDocument.objects.expiring_within(days, today=today).filter(
            supplier__is_active=True
        )
        supplier_ids = expiring.values_list('supplier_id', flat=True).distinct()

        notified = 0
        for supplier in Supplier.objects.filter(pk__in=supplier_ids).order_by('name'):
            documents = list(expiring.filter(supplier=supplier))
            NotificationService.send_supplier_compliance_expiry(supplier, documents)
            self.stdout.write(f"  {supplier.name}: {', '.join(doc.name for doc in documents)}")
            notified += 1

        self.stdout.write(self.style.SUCCESS(
            f"Notified {notified} supplier(s) with documents expiring within {days} days"
        ))
