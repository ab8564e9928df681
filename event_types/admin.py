from django.contrib import admin

from .models import EventType, Team


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "created_at")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}
    filter_horizontal = ("members",)


@admin.register(EventType)
class EventTypeAdmin(admin.ModelAdmin):
    list_display = ("title", "slug", "team", "schedule", "position", "updated_at")
    list_filter = ("team",)
    search_fields = ("title", "slug", "users__email", "users__username")
    list_select_related = ("team", "schedule")
    filter_horizontal = ("users",)
