import json
import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.utils.translation import gettext as _
from django.views.decorators.http import require_GET, require_POST

from accounts.decorators import login_required_api
from accounts.models import Profile
from event_types.services import group_event_types, serialize_event_type_groups

from .exceptions import HttpError, ScheduleNotFound
from .forms import AvailabilityFormSet, ScheduleForm, grid_to_initial
from .models import Schedule
from .services.schedules import get_schedule, parse_schedule_id, summarize_availability, update_schedule

logger = logging.getLogger(__name__)


def _flat_errors(exc):
    if hasattr(exc, 'error_dict'):
        return {field: [str(m) for m in msgs] for field, msgs in exc.message_dict.items()}
    return {'__all__': exc.messages}


def _load_schedule_or_404(user, raw_id):
    schedule_id = parse_schedule_id(raw_id)
    if schedule_id is None:
        raise Http404('Schedule not found')
    try:
        return schedule_id, get_schedule(user, schedule_id)
    except ScheduleNotFound:
        raise Http404('Schedule not found')


@login_required
def availability_list_view(request):
    profile = Profile.for_user(request.user)
    schedules = Schedule.objects.filter(user=request.user).prefetch_related('availability')
    return render(
        request,
        'availability/schedule_list.html',
        {
            'schedules': schedules,
            'default_schedule_id': profile.default_schedule_id,
        },
    )


@login_required
def schedule_edit_view(request, schedule):
    schedule_id, data = _load_schedule_or_404(request.user, schedule)
    profile = Profile.for_user(request.user)
    week_start = profile.week_start_index

    form = ScheduleForm(
        request.POST or None,
        user=request.user,
        initial={
            'name': data['schedule']['name'],
            'time_zone': data['time_zone'],
            'is_default': data['is_default'],
            'active_on': data['event_type_ids'],
        },
    )
    # Posted rows are the whole schedule; stored rows only seed the unbound formset.
    if request.method == 'POST':
        formset = AvailabilityFormSet(request.POST, prefix='availability', form_kwargs={'week_start': week_start})
    else:
        formset = AvailabilityFormSet(
            initial=grid_to_initial(data['availability'], week_start),
            prefix='availability',
            form_kwargs={'week_start': week_start},
        )

    if request.method == 'POST':
        if form.is_valid() and formset.is_valid():
            try:
                updated = update_schedule(
                    request.user,
                    schedule_id,
                    name=form.cleaned_data['name'],
                    schedule=formset.grid(),
                    time_zone=form.cleaned_data['time_zone'],
                    is_default=form.cleaned_data['is_default'],
                    event_type_ids=[event_type.id for event_type in form.cleaned_data['active_on']],
                )
            except HttpError as exc:
                messages.error(request, f'{exc.status_code}: {exc.message}')
            except ValidationError as exc:
                messages.error(request, _('Could not update availability: %(reason)s') % {'reason': '; '.join(exc.messages)})
            except Exception:
                logger.exception('schedule_update_failed schedule_id=%s user_id=%s', schedule_id, request.user.pk)
                messages.error(request, _('Something went wrong while saving your availability. Please try again.'))
            else:
                messages.success(
                    request,
                    _('Availability "%(name)s" updated successfully.') % {'name': updated.name},
                )
                return redirect('availability:list')
        else:
            messages.error(request, _('Please correct the highlighted errors.'))

    rows = Schedule.objects.get(pk=schedule_id).availability.all()
    return render(
        request,
        'availability/schedule_edit.html',
        {
            'schedule': data['schedule'],
            'schedule_id': schedule_id,
            'summary': summarize_availability(rows),
            'form': form,
            'formset': formset,
            'event_type_groups': group_event_types(request.user),
            'selected_event_type_ids': form['active_on'].value() or [],
        },
    )


@require_GET
@login_required_api
def schedule_api(request, schedule):
    schedule_id = parse_schedule_id(schedule)
    if schedule_id is None:
        return JsonResponse({'error': 'NOT_FOUND'}, status=404)
    try:
        return JsonResponse(get_schedule(request.user, schedule_id))
    except HttpError as exc:
        return JsonResponse({'error': exc.message}, status=exc.status_code)


@require_POST
@login_required_api
def schedule_update_api(request, schedule):
    schedule_id = parse_schedule_id(schedule)
    if schedule_id is None:
        return JsonResponse({'error': 'NOT_FOUND'}, status=404)
    try:
        payload = json.loads(request.body or b'{}')
    except ValueError:
        return JsonResponse({'ok': False, 'errors': {'__all__': ['Request body must be JSON.']}}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({'ok': False, 'errors': {'__all__': ['Request body must be a JSON object.']}}, status=400)

    is_default = payload.get('is_default', False)
    if not isinstance(is_default, bool):
        return JsonResponse({'ok': False, 'errors': {'is_default': ['Must be true or false.']}}, status=400)

    try:
        updated = update_schedule(
            request.user,
            schedule_id,
            name=payload.get('name'),
            schedule=payload.get('schedule'),
            time_zone=payload.get('time_zone'),
            is_default=is_default,
            event_type_ids=payload.get('event_type_ids'),
        )
    except HttpError as exc:
        return JsonResponse({'ok': False, 'error': exc.message}, status=exc.status_code)
    except ValidationError as exc:
        return JsonResponse({'ok': False, 'errors': _flat_errors(exc)}, status=400)

    return JsonResponse({'ok': True, 'schedule': {'id': updated.id, 'name': updated.name}})


@require_GET
@login_required_api
def event_types_api(request):
    groups = group_event_types(request.user)
    return JsonResponse({'event_type_groups': serialize_event_type_groups(groups)})
