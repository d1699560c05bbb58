from django.urls import path

from . import views

app_name = 'quotes'

urlpatterns = [
    path('quotes/', views.quote_list, name='quote-list'),
    path('quotes/<int:pk>/', views.quote_detail, name='quote-detail'),
    path('quote-packs/', views.quote_pack_list, name='quote-pack-list'),
    path('quote-packs/<int:pk>/', views.quote_pack_detail, name='quote-pack-detail'),
    path('quote-approvals/', views.quote_approval_list, name='quote-approval-list'),
    path('quote-approvals/<int:pk>/', views.quote_approval_detail, name='quote-approval-detail'),
    path('quote-approvals/<int:pk>/decision/', views.quote_approval_decision, name='quote-approval-decision'),
]
