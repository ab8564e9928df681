from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group, Permission
from django.core.management.base import BaseCommand, CommandError

from accounts.decorators import ADMIN_GROUP, MEMBER_GROUP

# Model permissions granted to each role, as (app_label, codename).
ROLE_PERMISSIONS = {
    ADMIN_GROUP: [
        ("app_store", "view_app"),
        ("app_store", "change_app"),
        ("app_store", "view_credential"),
        ("app_store", "view_auditlog"),
        ("event_types", "view_eventtype"),
        ("availability", "view_schedule"),
    ],
    MEMBER_GROUP: [
        ("availability", "view_schedule"),
        ("availability", "change_schedule"),
        ("event_types", "view_eventtype"),
    ],
}


class Command(BaseCommand):
    help = "Create the Admin and Member groups with their permissions, optionally adding users to Admin."

    def add_arguments(self, parser):
        parser.add_argument(
            "--admin",
            action="append",
            default=[],
            metavar="USERNAME",
            help="Add this user to the Admin group (repeatable).",
        )

    def handle(self, *args, **options):
        for role, wanted in ROLE_PERMISSIONS.items():
            group, created = Group.objects.get_or_create(name=role)
            permissions = [
                Permission.objects.get(content_type__app_label=app_label, codename=codename)
                for app_label, codename in wanted
            ]
            group.permissions.add(*permissions)
            status = "created" if created else "updated"
            self.stdout.write(self.style.SUCCESS(f"{role}: {status} ({len(permissions)} permissions)"))

        if not options["admin"]:
            return
        admins = Group.objects.get(name=ADMIN_GROUP)
        User = get_user_model()
        for username in options["admin"]:
            try:
                user = User.objects.get(**{User.USERNAME_FIELD: username})
            except User.DoesNotExist as exc:
                raise CommandError(f"No user named {username!r}.") from exc
            user.groups.add(admins)
            self.stdout.write(self.style.SUCCESS(f"{username}: added to {ADMIN_GROUP}"))
