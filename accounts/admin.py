from django.contrib import admin

from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "locale", "time_zone", "week_start", "default_schedule", "updated_at")
    list_filter = ("locale", "week_start")
    search_fields = ("user__username", "user__email")
    list_select_related = ("user", "default_schedule")
