from django.conf import settings
from django.db import models


class App(models.Model):
    CATEGORY_CALENDAR = "calendar"
    CATEGORY_VIDEO = "video"
    CATEGORY_PAYMENT = "payment"
    CATEGORY_MESSAGING = "messaging"
    CATEGORY_OTHER = "other"
    CATEGORY_CHOICES = [
        (CATEGORY_CALENDAR, "Calendar"),
        (CATEGORY_VIDEO, "Video"),
        (CATEGORY_PAYMENT, "Payment"),
        (CATEGORY_MESSAGING, "Messaging"),
        (CATEGORY_OTHER, "Other"),
    ]

    slug = models.SlugField(max_length=100, unique=True)
    dir_name = models.CharField(max_length=100, blank=True)
    categories = models.JSONField(default=list, blank=True)
    enabled = models.BooleanField(default=False)
    keys = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["slug"]

    def __str__(self):
        return self.slug

    def has_category(self, *categories):
        return any(category in (self.categories or []) for category in categories)


class Credential(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="credentials")
    app = models.ForeignKey(App, to_field="slug", on_delete=models.CASCADE, related_name="credentials")
    key = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.app_id} credential for {self.user}"


class AuditLog(models.Model):
    ACTION_ENABLE = "enable"
    ACTION_DISABLE = "disable"
    ACTION_SAVE_KEYS = "save_keys"
    ACTION_CHOICES = [
        (ACTION_ENABLE, "Enable"),
        (ACTION_DISABLE, "Disable"),
        (ACTION_SAVE_KEYS, "Save Keys"),
    ]

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="app_store_audit_events",
    )
    action = models.CharField(max_length=32, choices=ACTION_CHOICES)
    model_label = models.CharField(max_length=120)
    object_pk = models.CharField(max_length=64)
    object_repr = models.CharField(max_length=255)
    changes = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.action} {self.model_label}#{self.object_pk}"
