from functools import lru_cache
from zoneinfo import available_timezones

from django import forms

from event_types.models import EventType
from event_types.services import visible_event_types

from .models import Availability
from .services.schedules import intervals_to_grid, ordered_days


@lru_cache(maxsize=1)
def time_zone_choices():
    return [(name, name.replace('_', ' ')) for name in sorted(available_timezones())]


class ScheduleForm(forms.Form):
    name = forms.CharField(max_length=120)
    time_zone = forms.ChoiceField(choices=(), label='Timezone')
    is_default = forms.BooleanField(required=False, label='Set to default')
    active_on = forms.ModelMultipleChoiceField(
        queryset=EventType.objects.none(),
        required=False,
        widget=forms.CheckboxSelectMultiple,
        label='Active on',
    )

    def __init__(self, *args, user=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['time_zone'].choices = time_zone_choices()
        self.fields['time_zone'].widget.attrs.update(
            {
                'class': 'timezone-select',
                'data-placeholder': 'Search time zones',
            }
        )
        if user is not None:
            self.fields['active_on'].queryset = visible_event_types(user)


class AvailabilityIntervalForm(forms.Form):
    day_of_week = forms.TypedChoiceField(choices=(), coerce=int, empty_value=None, label='Day')
    start_time = forms.TimeField(widget=forms.TimeInput(attrs={'type': 'time', 'step': '900'}, format='%H:%M'))
    end_time = forms.TimeField(widget=forms.TimeInput(attrs={'type': 'time', 'step': '900'}, format='%H:%M'))

    def __init__(self, *args, week_start=0, **kwargs):
        super().__init__(*args, **kwargs)
        labels = dict(Availability.DAY_CHOICES)
        self.fields['day_of_week'].choices = [('', 'Day…')] + [
            (day, labels[day]) for day in ordered_days(week_start)
        ]

    def clean(self):
        cleaned = super().clean()
        start = cleaned.get('start_time')
        end = cleaned.get('end_time')
        if start and end and start >= end:
            raise forms.ValidationError('Start time must be before end time.')
        return cleaned


class BaseAvailabilityFormSet(forms.BaseFormSet):
    def intervals(self):
        rows = []
        for form in self.forms:
            if not form.has_changed():
                continue
            data = getattr(form, 'cleaned_data', None) or {}
            if data.get('DELETE'):
                continue
            if data.get('day_of_week') is None or not data.get('start_time') or not data.get('end_time'):
                continue
            rows.append((data['day_of_week'], data['start_time'], data['end_time']))
        return sorted(rows)

    def clean(self):
        if any(self.errors):
            return
        rows = self.intervals()
        for previous, current in zip(rows, rows[1:]):
            if previous[0] == current[0] and current[1] < previous[2]:
                labels = dict(Availability.DAY_CHOICES)
                raise forms.ValidationError(f'{labels[current[0]]} has overlapping time ranges.')

    def grid(self):
        return intervals_to_grid(self.intervals())


AvailabilityFormSet = forms.formset_factory(
    AvailabilityIntervalForm,
    formset=BaseAvailabilityFormSet,
    extra=1,
    can_delete=True,
)


def grid_to_initial(grid, week_start=0):
    """Formset initial rows from a weekly grid, ordered from the user's first day of the week."""
    initial = []
    for day in ordered_days(week_start):
        for slot in grid[day] if day < len(grid) else []:
            initial.append({'day_of_week': day, 'start_time': slot['start'], 'end_time': slot['end']})
    return initial
