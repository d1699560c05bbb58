from django.urls import path

from . import views

app_name = 'material_requests'

urlpatterns = [
    path('', views.mr_list, name='mr-list'),
    path('<int:pk>/', views.mr_detail, name='mr-detail'),
]
