from django.urls import path

from . import views

app_name = "app_store"

urlpatterns = [
    path("api/list-local/", views.list_local_api, name="list_local_api"),
    path("api/set-enabled/", views.set_enabled_api, name="set_enabled_api"),
    path("api/save-keys/", views.save_keys_api, name="save_keys_api"),

    path("admin/", views.admin_apps_view, name="admin_apps_default"),
    path("admin/<slug:variant>/", views.admin_apps_view, name="admin_apps"),
]
