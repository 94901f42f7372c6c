"""
URL configuration for the GearOps project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "GearOps Admin Panel"
admin.site.site_title = "GearOps Admin Portal"
admin.site.index_title = "Camera equipment operations"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('gearops.core.urls')),
    path('api/v1/', include('gearops.parties.urls')),
    path('api/v1/', include('gearops.catalog.urls')),
    path('api/v1/', include('gearops.inventory.urls')),
    path('api/v1/', include('gearops.inspections.urls')),
    path('api/v1/', include('gearops.purchasing.urls')),
    path('api/v1/', include('gearops.consignment.urls')),
    path('api/v1/', include('gearops.logistics.urls')),
    path('api/v1/', include('gearops.webhooks.urls')),
    path('api/v1/', include('gearops.reports.urls')),
]
