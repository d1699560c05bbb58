from django.urls import include, path

urlpatterns = [
    path('projects/', include('procurement.projects.urls')),
    path('suppliers/', include('procurement.suppliers.urls')),
    path('items/', include('procurement.items.urls')),
    path('mr/', include('procurement.material_requests.urls')),
    path('rfq/', include('procurement.rfq.urls')),
    path('', include('procurement.quotes.urls')),
    path('pr/', include('procurement.PR.urls')),
    path('po/', include('procurement.po.urls')),
]
