from django.core.management.base import BaseCommand

from app_store.catalog import get_local_app_metadata
from app_store.models import App


class Command(BaseCommand):
    help = "Create or refresh App rows from the bundled app catalog (enabled flags and keys are left alone)."

    def handle(self, *args, **options):
        for meta in get_local_app_metadata():
            _, created = App.objects.update_or_create(
                slug=meta["slug"],
                defaults={"dir_name": meta["dir_name"], "categories": meta["categories"]},
            )
            status = "created" if created else "updated"
            self.stdout.write(self.style.SUCCESS(f"{meta['slug']}: {status}"))
