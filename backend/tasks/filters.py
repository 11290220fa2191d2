"""Turn validated list filters into a store predicate."""

from typing import Any, Dict, Mapping, Tuple

# (field, direction) pairs applied by the repository on every task list.
DEFAULT_TASK_ORDERING: Tuple[Tuple[str, str], ...] = (
    ("due_date", "asc"),
    ("priority", "desc"),
    ("created_at", "desc"),
)

CATEGORY_ORDERING: Tuple[Tuple[str, str], ...] = (("name", "asc"),)

FILTER_FIELDS = ("status", "category_id")


def build_filter(validated_query: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only the filter fields that are actually set.

    An empty dict matches every task.
    """
    return {name: validated_query[name] for name in FILTER_FIELDS if validated_query.get(name)}
