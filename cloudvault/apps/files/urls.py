"""URL routes of the files app."""

from django.urls import path

from cloudvault.apps.files import views

app_name = 'files'

urlpatterns = [
    path('folders/', views.folders, name='folders'),
    path('folders/<uuid:folder_id>/', views.folder_detail, name='folder-detail'),
    path('folders/<uuid:folder_id>/path/', views.folder_path, name='folder-path'),
    path('files/', views.files, name='files'),
    path('files/<uuid:file_id>/', views.file_detail, name='file-detail'),
    path(
        'files/<uuid:file_id>/download/',
        views.file_download,
        name='file-download',
    ),
    path('storage/', views.storage_usage, name='storage-usage'),
]
