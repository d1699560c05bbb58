from django.urls import path

from . import views

app_name = 'items'

urlpatterns = [
    path('', views.item_list, name='item-list'),
    path('search/', views.item_search, name='item-search'),
    path('uom/', views.uom_list, name='uom-list'),
    path('<int:pk>/', views.item_detail, name='item-detail'),
    path('<int:pk>/approve/', views.item_approve, name='item-approve'),
    path('<int:pk>/suppliers/', views.item_suppliers, name='item-suppliers'),
    path('<int:pk>/prices/', views.item_prices, name='item-prices'),
    path('<int:pk>/price-trends/', views.item_price_trends, name='item-price-trends'),
]
