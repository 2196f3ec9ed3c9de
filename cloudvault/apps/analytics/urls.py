"""URL routes of the analytics app."""

from django.urls import path

from cloudvault.apps.analytics import views

app_name = 'analytics'

urlpatterns = [
    path('analytics/events/', views.events, name='events'),
    path('analytics/report/', views.report, name='report'),
]
