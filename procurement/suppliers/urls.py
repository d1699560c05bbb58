from django.urls import path

from . import views

app_name = 'suppliers'

urlpatterns = [
    path('', views.supplier_list, name='supplier-list'),
    path('<int:pk>/', views.supplier_detail, name='supplier-detail'),
    path('<int:pk>/approve/', views.supplier_approve, name='supplier-approve'),
    path('<int:pk>/contacts/', views.supplier_contacts, name='supplier-contacts'),
    path('<int:pk>/compliance-docs/', views.supplier_compliance_docs, name='supplier-compliance-docs'),
]
