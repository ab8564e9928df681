from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from accounts.models import Profile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def _create_profile_for_new_user(sender, instance, created, **kwargs):
    if not created:
        return
    Profile.objects.get_or_create(user=instance, defaults={"time_zone": settings.TIME_ZONE})
