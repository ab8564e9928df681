from django.conf import settings
from django.db import models


class Team(models.Model):
    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=120, unique=True)
    members = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="teams", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class EventType(models.Model):
    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200)
    team = models.ForeignKey(Team, null=True, blank=True, on_delete=models.CASCADE, related_name="event_types")
    users = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="event_types", blank=True)
    # {"apps": {"<app slug>": {"enabled": true, ...}}}
    metadata = models.JSONField(default=dict, blank=True)
    schedule = models.ForeignKey(
        "availability.Schedule",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="event_types",
    )
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-position", "id"]

    def __str__(self):
        return self.title

    def app_enabled(self, app_slug):
        apps = (self.metadata or {}).get("apps") or {}
        return bool((apps.get(app_slug) or {}).get("enabled"))

    def disable_app(self, app_slug):
        """Force the app's sub-flag off, keeping the rest of the metadata intact."""
        metadata = dict(self.metadata or {})
        apps = dict(metadata.get("apps") or {})
        apps[app_slug] = {**(apps.get(app_slug) or {}), "enabled": False}
        metadata["apps"] = apps
        self.metadata = metadata
