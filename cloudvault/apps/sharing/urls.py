"""URL routes of the sharing app."""

from django.urls import path

from cloudvault.apps.sharing import views

app_name = 'sharing'

urlpatterns = [
    path('share-links/', views.share_links, name='share-links'),
    path(
        'share-links/<uuid:link_id>/',
        views.share_link_detail,
        name='share-link-detail',
    ),
    path('shared/<str:token>/', views.shared_download, name='shared-download'),
]
