"""Input validation and output serialization for tasks.

Input serializers declare their fields in the order they are checked, so the
first entry of `serializer.errors` is the first failure encountered.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import timezone as dt_timezone
from typing import Any, Dict, List, Optional, Type

from django.utils.dateparse import parse_datetime
from rest_framework import serializers

from .models import Category, Task

INVALID_DATE = "Invalid date format"


class OffsetDateTimeField(serializers.Field):
    """ISO 8601 date-time that must carry a UTC offset (or 'Z')."""

    default_error_messages = {
        "invalid": INVALID_DATE,
        "null": INVALID_DATE,
    }

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("invalid")
        try:
            value = parse_datetime(data)
        except ValueError:
            # well formed but out of range, e.g. month 13
            value = None
        if value is None or value.tzinfo is None:
            self.fail("invalid")
        return value


class UTCDateTimeField(serializers.ReadOnlyField):
    """Renders an aware datetime as '2026-04-01T00:00:00.000Z'."""

    def to_representation(self, value):
        if value is None:
            return None
        value = value.astimezone(dt_timezone.utc)
        return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# -----------------------
# Input
# -----------------------


class TaskQuerySerializer(serializers.Serializer):
    """Filters accepted by the task list. Empty strings mean "no filter"."""

    status = serializers.ChoiceField(choices=Task.Status.choices, required=False, allow_blank=True)
    categoryId = serializers.CharField(
        source="category_id", required=False, allow_blank=True, trim_whitespace=False
    )

    def validate_status(self, value):
        return value or None

    def validate_categoryId(self, value):
        return value or None


class CreateTaskSerializer(serializers.Serializer):
    title = serializers.CharField(
        max_length=255,
        error_messages={
            "required": "Title is required",
            "blank": "Title is required",
            "null": "Title is required",
            "invalid": "Title is required",
        },
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    categoryId = serializers.CharField(
        source="category_id",
        trim_whitespace=False,
        error_messages={
            "required": "Category is required",
            "blank": "Category is required",
            "null": "Category is required",
            "invalid": "Category is required",
        },
    )
    priority = serializers.ChoiceField(
        choices=Task.Priority.choices,
        error_messages={"required": "Priority is required"},
    )
    dueDate = OffsetDateTimeField(source="due_date", required=False)
    status = serializers.ChoiceField(choices=Task.Status.choices, default=Task.Status.TODO)

    def validate_description(self, value):
        return value or None


class UpdateTaskSerializer(CreateTaskSerializer):
    """Full replacement of a task's mutable fields.

    `status` is required and an absent `dueDate` clears the due date.
    """

    dueDate = OffsetDateTimeField(source="due_date", required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(
        choices=Task.Status.choices,
        error_messages={"required": "Status is required"},
    )


@dataclass
class ValidationResult:
    """Outcome of validating untrusted input.

    Either `ok` with normalized `data`, or not `ok` with the first failing
    `field` and its `message`; `errors` keeps every field error.
    """

    ok: bool
    data: Dict[str, Any] = dataclass_field(default_factory=dict)
    field: Optional[str] = None
    message: Optional[str] = None
    errors: Dict[str, List[str]] = dataclass_field(default_factory=dict)


def _first_error(errors: Dict[str, Any]):
    name, messages = next(iter(errors.items()))
    while isinstance(messages, (list, dict)):
        messages = messages[0] if isinstance(messages, list) else next(iter(messages.values()))
    return name, str(messages)


def validate(serializer_class: Type[serializers.Serializer], data: Any) -> ValidationResult:
    """Run `serializer_class` over `data` without raising."""
    serializer = serializer_class(data=data)
    if serializer.is_valid():
        return ValidationResult(ok=True, data=dict(serializer.validated_data))
    name, message = _first_error(serializer.errors)
    return ValidationResult(ok=False, field=name, message=message, errors=dict(serializer.errors))


def validate_query(data: Any) -> ValidationResult:
    return validate(TaskQuerySerializer, data)


def validate_create(data: Any) -> ValidationResult:
    return validate(CreateTaskSerializer, data)


def validate_update(data: Any) -> ValidationResult:
    return validate(UpdateTaskSerializer, data)


# -----------------------
# Output
# -----------------------


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "color", "icon"]


class TaskSerializer(serializers.ModelSerializer):
    dueDate = UTCDateTimeField(source="due_date")
    categoryId = serializers.CharField(source="category_id", read_only=True)
    createdAt = UTCDateTimeField(source="created_at")
    updatedAt = UTCDateTimeField(source="updated_at")
    category = CategorySummarySerializer(read_only=True)

    class Meta:
        model = Task
        fields = [
            "id",
            "title",
            "description",
            "status",
            "priority",
            "dueDate",
            "categoryId",
            "createdAt",
            "updatedAt",
            "category",
        ]
