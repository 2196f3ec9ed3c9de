"""Root URL configuration for cloudvault."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('cloudvault.apps.files.urls')),
    path('api/', include('cloudvault.apps.sharing.urls')),
    path('api/', include('cloudvault.apps.analytics.urls')),
]
