import threading
from io import StringIO
from smtplib import SMTPException
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase

from app_store.keys_schemas import APP_KEYS_SCHEMAS, derive_app_dict_key_from_type
from app_store.models import App, AuditLog, Credential
from app_store.services import list_local, save_keys, set_enabled
from app_store.tests.utils import notice_workers
from event_types.models import EventType


class DeriveAppDictKeyTests(TestCase):
    def test_lookup_order(self):
        cases = {
            "giphy": "giphy",
            "giphy_other": "giphy",
            "zoom_video": "zoomvideo",
            "google_calendar": "googlecalendar",
            "stripe_payment": "stripepayment",
            "daily-video": "dailyvideo",
            "unknown_thing": "unknown_thing",
        }
        for app_type, expected in cases.items():
            with self.subTest(app_type=app_type):
                self.assertEqual(derive_app_dict_key_from_type(app_type, APP_KEYS_SCHEMAS), expected)


class ListLocalTests(TestCase):
    def test_conferencing_lists_video_apps_with_key_names_or_stored_keys(self):
        App.objects.create(
            slug="zoom",
            dir_name="zoomvideo",
            categories=["video"],
            enabled=True,
            keys={"client_id": "abc", "client_secret": "shh"},
        )
        apps = list_local("conferencing")
        self.assertEqual([a["slug"] for a in apps], ["zoom", "daily-video"])

        zoom, daily = apps
        self.assertEqual(zoom["keys"], {"client_id": "abc", "client_secret": "shh"})
        self.assertTrue(zoom["enabled"])
        self.assertEqual(zoom["type"], "zoom_video")
        self.assertEqual(daily["keys"], ["api_key", "scale_plan"])
        self.assertFalse(daily["enabled"])

    def test_apps_without_schema_have_no_keys(self):
        apps = {a["slug"]: a for a in list_local("other")}
        self.assertIsNone(apps["vital-automation"]["keys"])
        self.assertEqual(apps["giphy"]["keys"], ["api_key"])

    def test_rows_outside_the_category_are_ignored(self):
        App.objects.create(slug="google-calendar", categories=["other"], enabled=True)
        google = list_local("calendar")[0]
        self.assertEqual(google["slug"], "google-calendar")
        self.assertFalse(google["enabled"])
        self.assertEqual(google["keys"], ["client_id", "client_secret", "redirect_uris"])

    def test_empty_stored_keys_fall_back_to_key_names(self):
        App.objects.create(slug="giphy", categories=["other"], keys={})
        giphy = {a["slug"]: a for a in list_local("other")}["giphy"]
        self.assertEqual(giphy["keys"], ["api_key"])

    def test_unknown_variant_is_empty(self):
        self.assertEqual(list_local("automation"), [])


class SetEnabledTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.admin = User.objects.create_superuser("root", "root@example.com", "pw")
        self.ana = User.objects.create_user("ana", "ana@example.com", "pw")
        self.ben = User.objects.create_user("ben", "ben@example.com", "pw")
        self.nomail = User.objects.create_user("nomail", "", "pw")

    def test_stores_exactly_the_requested_value(self):
        App.objects.create(slug="stripe", categories=["payment"], enabled=False)
        self.assertFalse(set_enabled("stripe", False))
        self.assertFalse(App.objects.get(slug="stripe").enabled)
        self.assertTrue(set_enabled("stripe", True))
        self.assertTrue(set_enabled("stripe", True))
        self.assertTrue(App.objects.get(slug="stripe").enabled)

    def test_unknown_slug(self):
        with self.assertRaises(App.DoesNotExist):
            set_enabled("missing", True)

    def test_enabling_sends_nothing_and_is_audited(self):
        App.objects.create(slug="google-calendar", categories=["calendar"])
        Credential.objects.create(user=self.ana, app_id="google-calendar")
        with self.captureOnCommitCallbacks(execute=True):
            set_enabled("google-calendar", True, actor=self.admin)
        self.assertEqual(mail.outbox, [])
        entry = AuditLog.objects.get()
        self.assertEqual(entry.action, AuditLog.ACTION_ENABLE)
        self.assertEqual(entry.actor, self.admin)
        self.assertEqual(entry.changes["after"], True)

    def test_disabling_calendar_app_notifies_each_credentialed_user_once(self):
        App.objects.create(slug="google-calendar", categories=["calendar"], enabled=True)
        Credential.objects.create(user=self.ana, app_id="google-calendar")
        Credential.objects.create(user=self.ana, app_id="google-calendar")
        Credential.objects.create(user=self.ben, app_id="google-calendar")
        Credential.objects.create(user=self.nomail, app_id="google-calendar")

        with notice_workers():
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                result = set_enabled("google-calendar", False, actor=self.admin)

        self.assertFalse(result)
        self.assertEqual(len(callbacks), 1)
        self.assertEqual(sorted(m.to[0] for m in mail.outbox), ["ana@example.com", "ben@example.com"])
        self.assertIn("Google Calendar", mail.outbox[0].subject)
        self.assertEqual(AuditLog.objects.get().action, AuditLog.ACTION_DISABLE)

    def test_notices_wait_for_commit(self):
        App.objects.create(slug="zoom", categories=["video"], enabled=True)
        Credential.objects.create(user=self.ana, app_id="zoom")
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            set_enabled("zoom", False)
        self.assertEqual(mail.outbox, [])
        self.assertEqual(len(callbacks), 1)

    def test_failed_send_does_not_stop_other_sends(self):
        App.objects.create(slug="zoom", categories=["video"], enabled=True)
        Credential.objects.create(user=self.ana, app_id="zoom")
        Credential.objects.create(user=self.ben, app_id="zoom")

        with patch("app_store.notifications.send_mail", side_effect=[SMTPException("down"), 1]) as send:
            with self.assertLogs("app_store.notifications", level="ERROR"):
                with notice_workers():
                    with self.captureOnCommitCallbacks(execute=True):
                        result = set_enabled("zoom", False)

        self.assertFalse(result)
        self.assertEqual(send.call_count, 2)
        self.assertFalse(App.objects.get(slug="zoom").enabled)

    def test_commit_hook_does_not_wait_for_slow_sends(self):
        App.objects.create(slug="zoom", categories=["video"], enabled=True)
        Credential.objects.create(user=self.ana, app_id="zoom")
        Credential.objects.create(user=self.ben, app_id="zoom")
        release = threading.Event()
        finished = []

        def slow_send(**kwargs):
            release.wait(5)
            finished.append(kwargs["recipient_list"][0])
            return 1

        with patch("app_store.notifications.send_mail", side_effect=slow_send):
            with notice_workers():
                with self.captureOnCommitCallbacks(execute=True):
                    set_enabled("zoom", False)
                self.assertEqual(finished, [])
                release.set()
        self.assertEqual(sorted(finished), ["ana@example.com", "ben@example.com"])

    def test_disabling_other_app_switches_it_off_on_event_types(self):
        App.objects.create(slug="giphy", categories=["other"], enabled=True)
        welcome = EventType.objects.create(
            title="Welcome",
            slug="welcome",
            metadata={"apps": {"giphy": {"enabled": True, "thankYouPage": "cat.gif"}}},
        )
        welcome.users.add(self.ana, self.ben)
        demo = EventType.objects.create(title="Demo", slug="demo", metadata={"apps": {"giphy": {"enabled": True}}})
        demo.users.add(self.ana)
        off = EventType.objects.create(title="Off", slug="off", metadata={"apps": {"giphy": {"enabled": False}}})
        off.users.add(self.ben)
        plain = EventType.objects.create(title="Plain", slug="plain")
        plain.users.add(self.ben)

        with notice_workers():
            with self.captureOnCommitCallbacks(execute=True):
                set_enabled("giphy", False)

        welcome.refresh_from_db()
        demo.refresh_from_db()
        plain.refresh_from_db()
        self.assertFalse(welcome.app_enabled("giphy"))
        self.assertEqual(welcome.metadata["apps"]["giphy"]["thankYouPage"], "cat.gif")
        self.assertFalse(demo.app_enabled("giphy"))
        self.assertEqual(plain.metadata, {})

        by_recipient = {m.to[0]: m for m in mail.outbox}
        self.assertEqual(set(by_recipient), {"ana@example.com", "ben@example.com"})
        self.assertIn("Welcome", by_recipient["ana@example.com"].body)
        self.assertIn("Demo", by_recipient["ana@example.com"].body)
        self.assertNotIn("Demo", by_recipient["ben@example.com"].body)
        self.assertNotIn("Off", by_recipient["ben@example.com"].body)

    def test_disabling_other_app_with_no_event_types_sends_nothing(self):
        App.objects.create(slug="stripe", categories=["payment"], enabled=True)
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            set_enabled("stripe", False)
        self.assertEqual(callbacks, [])
        self.assertEqual(mail.outbox, [])


class SaveKeysTests(TestCase):
    def setUp(self):
        App.objects.create(slug="stripe", categories=["payment"])
        App.objects.create(slug="daily-video", categories=["video"])

    def test_invalid_keys_write_nothing(self):
        with self.assertRaises(ValidationError) as ctx:
            save_keys("stripe", "stripe_payment", {"client_id": "nope", "private_key": "sk_1"})
        self.assertIn("client_id", ctx.exception.message_dict)
        self.assertIn("public_key", ctx.exception.message_dict)
        self.assertIsNone(App.objects.get(slug="stripe").keys)
        self.assertFalse(AuditLog.objects.exists())

    def test_valid_keys_store_cleaned_values(self):
        save_keys("daily-video", "daily_video", {"api_key": "  k-123  ", "ignored": "x"})
        self.assertEqual(App.objects.get(slug="daily-video").keys, {"api_key": "k-123", "scale_plan": "false"})
        entry = AuditLog.objects.get()
        self.assertEqual(entry.action, AuditLog.ACTION_SAVE_KEYS)
        self.assertEqual(entry.changes["key_names"], ["api_key", "scale_plan"])
        self.assertNotIn("k-123", str(entry.changes))

    def test_unknown_type_and_bad_payload(self):
        with self.assertRaises(ValidationError):
            save_keys("stripe", "fax_machine", {"a": "b"})
        with self.assertRaises(ValidationError):
            save_keys("stripe", "stripe_payment", "sk_live")

    def test_unknown_slug(self):
        with self.assertRaises(App.DoesNotExist):
            save_keys("missing", "giphy_other", {"api_key": "k"})


class SeedAppsCommandTests(TestCase):
    def test_seed_keeps_enabled_and_keys(self):
        App.objects.create(slug="giphy", categories=[], enabled=True, keys={"api_key": "k"})
        call_command("seed_apps", stdout=StringIO())
        giphy = App.objects.get(slug="giphy")
        self.assertTrue(giphy.enabled)
        self.assertEqual(giphy.keys, {"api_key": "k"})
        self.assertEqual(giphy.categories, ["other"])
        self.assertEqual(giphy.dir_name, "giphy")
        self.assertEqual(App.objects.count(), 8)
