from django.apps import AppConfig


class PRConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'procurement.PR'
    label = 'PR'
    verbose_name = 'Purchase Requisitions'
