from django import template

from ..due_dates import due_date_status, format_long_date

register = template.Library()


@register.filter
def due_status(task):
    """DueDateStatus for the task, or None when it has no due date."""
    return due_date_status(task)


@register.filter
def long_date(value):
    if value is None:
        return ""
    return format_long_date(value)
