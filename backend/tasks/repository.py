"""Store access for tasks and categories.

Views receive a `TaskRepository` instance instead of touching the ORM so the
HTTP layer can be exercised against a fake store.
"""

import functools
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, transaction
from django.db.models import Case, F, IntegerField, QuerySet, Value, When

from .filters import CATEGORY_ORDERING, DEFAULT_TASK_ORDERING
from .models import PRIORITY_RANK, Category, Task

logger = logging.getLogger(__name__)

Ordering = Sequence[Tuple[str, str]]

MUTABLE_TASK_FIELDS = ("title", "description", "status", "priority", "due_date")


class RepositoryError(Exception):
    """The store could not complete an operation."""


def _store_call(func):
    """Re-raise store failures as RepositoryError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (DatabaseError, ObjectDoesNotExist) as exc:
            raise RepositoryError(f"{func.__name__} failed: {exc}") from exc

    return wrapper


def _priority_rank() -> Case:
    return Case(
        *[When(priority=value, then=Value(rank)) for value, rank in PRIORITY_RANK.items()],
        default=Value(-1),
        output_field=IntegerField(),
    )


def _apply_ordering(queryset: QuerySet, ordering: Ordering) -> QuerySet:
    """Translate (field, direction) pairs into ORM ordering.

    Nulls always sort last; priority sorts by rank, not alphabetically.
    """
    expressions = []
    for name, direction in ordering:
        if name == "priority":
            queryset = queryset.annotate(priority_rank=_priority_rank())
            expr = F("priority_rank")
        else:
            expr = F(name)
        if direction == "desc":
            expressions.append(expr.desc(nulls_last=True))
        else:
            expressions.append(expr.asc(nulls_last=True))
    return queryset.order_by(*expressions)


class TaskRepository:
    def tasks(self) -> QuerySet:
        return Task.objects.select_related("category")

    @_store_call
    def list_tasks(self, where: Mapping[str, Any], ordering: Ordering = DEFAULT_TASK_ORDERING) -> List[Task]:
        return list(_apply_ordering(self.tasks().filter(**where), ordering))

    @_store_call
    def find_task_by_id(self, task_id: str) -> Optional[Task]:
        return self.tasks().filter(pk=task_id).first()

    @_store_call
    def create_task(self, data: Mapping[str, Any]) -> Task:
        with transaction.atomic():
            category = Category.objects.get(pk=data["category_id"])
            task = Task.objects.create(
                title=data["title"],
                description=data.get("description"),
                status=data.get("status") or Task.Status.TODO,
                priority=data["priority"],
                due_date=data.get("due_date"),
                category=category,
            )
        logger.info("Created task %s in category %s", task.pk, category.name)
        return task

    @_store_call
    def update_task(self, task_id: str, data: Mapping[str, Any]) -> Task:
        """Replace every mutable field of the task; missing keys become None."""
        with transaction.atomic():
            task = Task.objects.get(pk=task_id)
            task.category = Category.objects.get(pk=data["category_id"])
            for name in MUTABLE_TASK_FIELDS:
                setattr(task, name, data.get(name))
            task.save()
        logger.info("Updated task %s", task.pk)
        return task

    @_store_call
    def create_category(self, name: str, color: str, icon: str) -> Category:
        with transaction.atomic():
            category = Category.objects.create(name=name, color=color, icon=icon)
        logger.info("Created category %s", name)
        return category

    @_store_call
    def list_categories(self, ordering: Ordering = CATEGORY_ORDERING) -> List[Category]:
        return list(_apply_ordering(Category.objects.all(), ordering))

    @_store_call
    def delete_all(self) -> Dict[str, int]:
        """Remove every task and category (seed reset)."""
        with transaction.atomic():
            tasks_deleted, _ = Task.objects.all().delete()
            categories_deleted, _ = Category.objects.all().delete()
        return {"tasks": tasks_deleted, "categories": categories_deleted}
