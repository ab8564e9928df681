from django import template

from availability.services.schedules import summarize_availability

register = template.Library()


@register.filter
def availability_as_string(rows):
    """Summary lines for a schedule's availability rows."""
    if not rows:
        return []
    if hasattr(rows, 'all'):
        rows = rows.all()
    return summarize_availability(rows)


@register.filter
def contains(values, item):
    if not values:
        return False
    return str(item) in {str(v) for v in values}
