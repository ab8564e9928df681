from django.contrib.auth import get_user_model
from django.test import TestCase

from event_types.models import EventType, Team
from event_types.services import group_event_types, serialize_event_type_groups, visible_event_types


class GroupEventTypesTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.alice = User.objects.create_user("alice", "alice@example.com", "pw", first_name="Alice", last_name="Smith")
        self.bob = User.objects.create_user("bob", "bob@example.com", "pw")

        self.intro = EventType.objects.create(title="Intro call", slug="intro")
        self.intro.users.add(self.alice)

        self.sales = Team.objects.create(name="Sales", slug="sales")
        self.sales.members.add(self.alice, self.bob)
        self.demo = EventType.objects.create(title="Demo", slug="demo", team=self.sales)

        empty_team = Team.objects.create(name="Archive", slug="archive")
        empty_team.members.add(self.alice)

        self.bob_only = EventType.objects.create(title="Bob 1:1", slug="bob")
        self.bob_only.users.add(self.bob)

    def test_personal_group_then_teams_and_empty_groups_skipped(self):
        groups = group_event_types(self.alice)
        self.assertEqual([g["group_name"] for g in groups], ["Alice Smith", "Sales"])
        self.assertEqual(groups[0]["event_types"], [self.intro])
        self.assertEqual(groups[1]["event_types"], [self.demo])

    def test_personal_group_labelled_by_first_roster_user(self):
        self.intro.users.add(self.bob)
        groups = group_event_types(self.alice)
        # alice was created first, so she is the first roster user
        self.assertEqual(groups[0]["group_name"], "Alice Smith")

        shared = EventType.objects.create(title="Shared", slug="shared")
        shared.users.add(self.alice, self.bob)
        groups = group_event_types(self.bob)
        self.assertEqual(groups[0]["group_name"], "bob")

    def test_user_without_event_types_gets_no_groups(self):
        carol = get_user_model().objects.create_user("carol", "carol@example.com", "pw")
        self.assertEqual(group_event_types(carol), [])

    def test_visible_event_types(self):
        self.assertEqual(set(visible_event_types(self.alice)), {self.intro, self.demo})
        self.assertEqual(set(visible_event_types(self.bob)), {self.demo, self.bob_only})

    def test_serialize_groups(self):
        payload = serialize_event_type_groups(group_event_types(self.alice))
        self.assertEqual(
            payload[1],
            {"group_name": "Sales", "event_types": [{"id": self.demo.id, "title": "Demo", "schedule_id": None}]},
        )


class EventTypeMetadataTests(TestCase):
    def test_disable_app_keeps_other_settings(self):
        event_type = EventType(
            title="Call",
            slug="call",
            metadata={"apps": {"giphy": {"enabled": True, "thankYouPage": "x"}, "stripe": {"enabled": True}}},
        )
        self.assertTrue(event_type.app_enabled("giphy"))
        event_type.disable_app("giphy")
        self.assertFalse(event_type.app_enabled("giphy"))
        self.assertEqual(event_type.metadata["apps"]["giphy"]["thankYouPage"], "x")
        self.assertTrue(event_type.app_enabled("stripe"))

    def test_app_enabled_with_empty_metadata(self):
        self.assertFalse(EventType(title="Call", slug="call").app_enabled("giphy"))
