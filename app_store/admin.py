from django.contrib import admin

from .models import App, AuditLog, Credential


@admin.register(App)
class AppAdmin(admin.ModelAdmin):
    list_display = ("slug", "dir_name", "categories", "enabled", "updated_at")
    list_filter = ("enabled",)
    search_fields = ("slug", "dir_name")
    exclude = ("keys",)


@admin.register(Credential)
class CredentialAdmin(admin.ModelAdmin):
    list_display = ("app", "user", "created_at")
    list_filter = ("app",)
    search_fields = ("user__email", "user__username", "app__slug")
    list_select_related = ("app", "user")
    exclude = ("key",)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "model_label", "object_pk", "action", "actor")
    list_filter = ("action", "model_label")
    search_fields = ("model_label", "object_pk", "object_repr")
    readonly_fields = ("created_at",)
