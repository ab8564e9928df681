from django.db.models import Q

from .models import EventType


def _display_name(user):
    if user is None:
        return ""
    return user.get_full_name() or user.get_username()


def visible_event_types(user):
    """Event types the user owns personally or through one of their teams."""
    return (
        EventType.objects.filter(Q(team__isnull=True, users=user) | Q(team__members=user))
        .select_related("team", "schedule")
        .distinct()
    )


def _group_label(event_types):
    first = event_types[0]
    if first.team is not None:
        return first.team.name or ""
    return _display_name(first.users.order_by("id").first())


def group_event_types(user):
    """Group the user's event types into one personal group and one group per team.

    Each group is labelled from its first event type: the team name when that
    event type belongs to a team, otherwise the name of its first roster user.
    """
    raw_groups = [
        list(
            EventType.objects.filter(team__isnull=True, users=user)
            .select_related("team", "schedule")
            .prefetch_related("users")
            .distinct()
        )
    ]
    for team in user.teams.order_by("name"):
        raw_groups.append(list(team.event_types.select_related("team", "schedule").prefetch_related("users")))

    groups = []
    for event_types in raw_groups:
        if not event_types:
            continue
        groups.append({"group_name": _group_label(event_types), "event_types": event_types})
    return groups


def serialize_event_type_groups(groups):
    return [
        {
            "group_name": group["group_name"],
            "event_types": [
                {"id": event_type.id, "title": event_type.title, "schedule_id": event_type.schedule_id}
                for event_type in group["event_types"]
            ],
        }
        for group in groups
    ]
