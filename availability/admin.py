from django.contrib import admin

from .models import Availability, Schedule


class AvailabilityInline(admin.TabularInline):
    model = Availability
    extra = 0


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'user', 'time_zone', 'updated_at')
    search_fields = ('name', 'user__username', 'user__email')
    list_select_related = ('user',)
    inlines = [AvailabilityInline]


@admin.register(Availability)
class AvailabilityAdmin(admin.ModelAdmin):
    list_display = ('schedule', 'day_of_week', 'start_time', 'end_time')
    list_filter = ('day_of_week',)
    search_fields = ('schedule__name',)
