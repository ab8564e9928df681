import logging
from datetime import datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.dates import WEEKDAYS_ABBR

from accounts.models import Profile
from availability.exceptions import ScheduleNotFound
from availability.models import Availability, Schedule
from event_types.models import EventType
from event_types.services import visible_event_types

logger = logging.getLogger(__name__)

DAYS_IN_WEEK = 7
TIME_FORMAT = '%H:%M'


def parse_schedule_id(raw):
    """Return the schedule id as an int, or None when the route value is not a plain number."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, str) and raw.isascii() and raw.isdigit():
        return int(raw)
    return None


def schedule_cache_key(schedule_id):
    return f'availability:schedule:{schedule_id}'


def invalidate_schedule_cache(*schedule_ids):
    keys = [schedule_cache_key(schedule_id) for schedule_id in schedule_ids if schedule_id]
    if keys:
        cache.delete_many(keys)


def _format_time(value):
    return value.strftime(TIME_FORMAT)


def _parse_time(value):
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValueError(value)
    return datetime.strptime(value.strip(), TIME_FORMAT).time()


def availability_to_grid(rows):
    grid = [[] for _ in range(DAYS_IN_WEEK)]
    for row in sorted(rows, key=lambda r: (r.day_of_week, r.start_time)):
        grid[row.day_of_week].append({'start': _format_time(row.start_time), 'end': _format_time(row.end_time)})
    return grid


def intervals_to_grid(intervals):
    grid = [[] for _ in range(DAYS_IN_WEEK)]
    for day, start, end in sorted(intervals):
        grid[day].append({'start': _format_time(start), 'end': _format_time(end)})
    return grid


def parse_schedule_grid(grid):
    """Validate a weekly grid (index 0 = Sunday) and return sorted (day, start, end) tuples."""
    if not isinstance(grid, (list, tuple)) or len(grid) > DAYS_IN_WEEK:
        raise ValidationError({'schedule': 'Schedule must be a list of at most seven days.'})

    intervals = []
    for day, slots in enumerate(grid):
        if slots is None:
            continue
        if not isinstance(slots, (list, tuple)):
            raise ValidationError({'schedule': f'Day {day} must be a list of time ranges.'})
        day_intervals = []
        for slot in slots:
            if not isinstance(slot, dict):
                raise ValidationError({'schedule': f'Day {day} has an invalid time range.'})
            try:
                start = _parse_time(slot.get('start'))
                end = _parse_time(slot.get('end'))
            except (TypeError, ValueError):
                raise ValidationError({'schedule': f'Day {day} times must use HH:MM.'})
            if start >= end:
                raise ValidationError({'schedule': f'Day {day}: start time must be before end time.'})
            day_intervals.append((day, start, end))

        day_intervals.sort()
        for previous, current in zip(day_intervals, day_intervals[1:]):
            if current[1] < previous[2]:
                raise ValidationError({'schedule': f'Day {day} has overlapping time ranges.'})
        intervals.extend(day_intervals)
    return intervals


def validate_time_zone(value):
    if not value or not isinstance(value, str):
        raise ValidationError({'time_zone': 'Time zone is required.'})
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError({'time_zone': f'Unknown time zone: {value}'})
    return value


def ordered_days(week_start_index=0):
    """Day indexes (0 = Sunday) starting from the user's first day of the week."""
    return [(week_start_index + offset) % DAYS_IN_WEEK for offset in range(DAYS_IN_WEEK)]


def _day_abbr(day):
    # WEEKDAYS_ABBR is keyed Monday = 0.
    return str(WEEKDAYS_ABBR[(day + 6) % DAYS_IN_WEEK])


def _format_clock(value):
    return value.strftime('%I:%M %p').lstrip('0')


def _day_runs(days):
    runs = []
    for day in sorted(days):
        if runs and runs[-1][-1] == day - 1:
            runs[-1].append(day)
        else:
            runs.append([day])
    return runs


def summarize_availability(rows):
    """Human readable lines such as "Mon - Fri, 9:00 AM - 5:00 PM", one per distinct time range."""
    ranges = {}
    for row in sorted(rows, key=lambda r: (r.day_of_week, r.start_time)):
        ranges.setdefault((row.start_time, row.end_time), []).append(row.day_of_week)

    lines = []
    for (start, end), days in ranges.items():
        labels = []
        for run in _day_runs(days):
            if len(run) > 2:
                labels.append(f'{_day_abbr(run[0])} - {_day_abbr(run[-1])}')
            else:
                labels.extend(_day_abbr(day) for day in run)
        lines.append(f'{", ".join(labels)}, {_format_clock(start)} - {_format_clock(end)}')
    return lines


def serialize_schedule(schedule):
    rows = list(schedule.availability.all())
    profile = Profile.for_user(schedule.user)
    return {
        'schedule': {
            'id': schedule.id,
            'name': schedule.name,
            'availability': [
                {
                    'id': row.id,
                    'days': [row.day_of_week],
                    'start_time': _format_time(row.start_time),
                    'end_time': _format_time(row.end_time),
                }
                for row in rows
            ],
        },
        'availability': availability_to_grid(rows),
        'time_zone': schedule.time_zone or profile.time_zone,
        'is_default': profile.default_schedule_id == schedule.id,
        'event_type_ids': sorted(schedule.event_types.values_list('id', flat=True)),
        'owner_id': schedule.user_id,
    }


def get_schedule(user, schedule_id):
    """Serialized schedule for the editor, served from cache when fresh."""
    key = schedule_cache_key(schedule_id)
    payload = cache.get(key)
    if payload is None:
        schedule = (
            Schedule.objects.select_related('user')
            .prefetch_related('availability')
            .filter(pk=schedule_id)
            .first()
        )
        if schedule is None:
            raise ScheduleNotFound(schedule_id)
        payload = serialize_schedule(schedule)
        cache.set(key, payload, getattr(settings, 'SCHEDULE_CACHE_SECONDS', 10))

    if payload['owner_id'] != user.pk:
        raise ScheduleNotFound(schedule_id)
    return {k: v for k, v in payload.items() if k != 'owner_id'}


def _link_event_types(user, schedule, event_type_ids):
    requested = {int(pk) for pk in event_type_ids}
    allowed = set(visible_event_types(user).filter(id__in=requested).values_list('id', flat=True))
    unknown = requested - allowed
    if unknown:
        raise ValidationError({'event_type_ids': f'Unknown event types: {sorted(unknown)}'})

    previous_schedule_ids = set(
        EventType.objects.filter(id__in=allowed, schedule__isnull=False)
        .exclude(schedule=schedule)
        .values_list('schedule_id', flat=True)
    )
    EventType.objects.filter(id__in=allowed).update(schedule=schedule)
    EventType.objects.filter(schedule=schedule).exclude(id__in=allowed).update(schedule=None)
    return previous_schedule_ids


def update_schedule(user, schedule_id, name, schedule, time_zone, is_default, event_type_ids=None):
    """Replace a schedule's name, time zone, weekly intervals and default flag.

    When ``event_type_ids`` is given, exactly those event types end up linked
    to the schedule. Only the cache entries of schedules whose serialized
    form changed are invalidated.
    """
    name = name.strip() if isinstance(name, str) else ''
    if not name:
        raise ValidationError({'name': 'Name is required.'})
    max_length = Schedule._meta.get_field('name').max_length
    if len(name) > max_length:
        raise ValidationError({'name': f'Name must be at most {max_length} characters.'})
    intervals = parse_schedule_grid(schedule)
    validate_time_zone(time_zone)
    if event_type_ids is not None:
        try:
            event_type_ids = [int(pk) for pk in event_type_ids]
        except (TypeError, ValueError):
            raise ValidationError({'event_type_ids': 'Event type ids must be integers.'})

    with transaction.atomic():
        row = Schedule.objects.select_for_update().filter(pk=schedule_id, user=user).first()
        if row is None:
            raise ScheduleNotFound(schedule_id)
        affected = {row.id}

        row.name = name
        row.time_zone = time_zone
        row.save(update_fields=['name', 'time_zone', 'updated_at'])

        row.availability.all().delete()
        Availability.objects.bulk_create(
            [
                Availability(schedule=row, day_of_week=day, start_time=start, end_time=end)
                for day, start, end in intervals
            ]
        )

        profile = Profile.for_user(user)
        if is_default and profile.default_schedule_id != row.id:
            affected.add(profile.default_schedule_id)
            profile.default_schedule = row
            profile.save(update_fields=['default_schedule', 'updated_at'])
        elif not is_default and profile.default_schedule_id == row.id:
            profile.default_schedule = None
            profile.save(update_fields=['default_schedule', 'updated_at'])

        if event_type_ids is not None:
            affected |= _link_event_types(user, row, event_type_ids)

    invalidate_schedule_cache(*affected)
    logger.info(
        'schedule_updated schedule_id=%s user_id=%s intervals=%s is_default=%s',
        row.id,
        user.pk,
        len(intervals),
        bool(is_default),
    )
    return row
