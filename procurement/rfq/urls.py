from django.urls import path

from . import views

app_name = 'rfq'

urlpatterns = [
    path('', views.rfq_list, name='rfq-list'),
    path('<int:pk>/', views.rfq_detail, name='rfq-detail'),
    path('<int:pk>/dispatch/', views.rfq_dispatch, name='rfq-dispatch'),
    path('<int:pk>/compare/', views.rfq_compare, name='rfq-compare'),
    path('<int:pk>/comparison/', views.rfq_comparison, name='rfq-comparison'),
]
