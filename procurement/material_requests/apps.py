from django.apps import AppConfig


class MaterialRequestsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'procurement.material_requests'
    label = 'material_requests'
    verbose_name = 'Material Requests'
