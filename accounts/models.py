from django.conf import settings
from django.db import models


WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class Profile(models.Model):
    """Per-user preferences the scheduling pages and notifications read."""

    WEEK_START_CHOICES = [(name, name) for name in WEEKDAY_NAMES]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    locale = models.CharField(max_length=10, default="en")
    time_zone = models.CharField(max_length=64, default="UTC")
    week_start = models.CharField(max_length=10, choices=WEEK_START_CHOICES, default="Sunday")
    default_schedule = models.ForeignKey(
        "availability.Schedule",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Profile - {self.user}"

    @property
    def week_start_index(self):
        try:
            return WEEKDAY_NAMES.index(self.week_start)
        except ValueError:
            return 0

    @classmethod
    def for_user(cls, user):
        profile, _ = cls.objects.get_or_create(user=user, defaults={"time_zone": settings.TIME_ZONE})
        return profile
