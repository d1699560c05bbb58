"""
QuerySets shared by the procurement models.

    SoftDeleteQuerySet: active(), inactive()
    SoftDeleteManager:  manager for SoftDeleteMixin models
"""
from django.db import models
from django.db.models import Q


class BaseQuerySet(models.QuerySet):

    def search(self, term, fields):
        """Case-insensitive contains match across several fields."""
        if not term:
            return self
        query = Q()
        for field in fields:
            query |= Q(**{f"{field}__icontains": term})
        return self.filter(query)


class SoftDeleteQuerySet(BaseQuerySet):

    def active(self):
        return self.filter(is_active=True)

    def inactive(self):
        return self.filter(is_active=False)


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """
    Usage:
        class Supplier(SoftDeleteMixin, models.Model):
            objects = SoftDeleteManager()

        Supplier.objects.active().search('steel', ['name', 'category'])
    """
