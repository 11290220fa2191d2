"""Server-rendered task pages.

Unlike the JSON API, the list page never rejects its query string: filters
that fail validation are ignored and every task is shown. The create and edit
forms go through the same validators and repository as the API.
"""

import logging
from datetime import timezone as dt_timezone
from typing import Any, Dict

from django.http import Http404
from django.shortcuts import redirect, render
from django.utils.dateparse import parse_date
from django.views import View

from .filters import CATEGORY_ORDERING, DEFAULT_TASK_ORDERING, build_filter
from .models import Task
from .repository import RepositoryError
from .serializers import validate_create, validate_query, validate_update
from .views import TASK_NOT_FOUND, RepositoryMixin

logger = logging.getLogger(__name__)

FORM_FIELDS = ("title", "description", "categoryId", "priority", "status")


def date_input_to_iso(value: str) -> str:
    """'2026-04-15' -> '2026-04-15T00:00:00.000Z' (midnight UTC).

    Anything that is not a calendar date is passed through untouched so the
    validator reports it.
    """
    try:
        day = parse_date(value)
    except ValueError:
        day = None
    if day is None:
        return value
    return f"{day.isoformat()}T00:00:00.000Z"


def date_input_value(value) -> str:
    if value is None:
        return ""
    return value.astimezone(dt_timezone.utc).date().isoformat()


def form_payload(post, clear_due_date: bool) -> Dict[str, Any]:
    """Build a validator payload from submitted form fields."""
    data = {name: post[name] for name in FORM_FIELDS if name in post}
    due = post.get("dueDate", "")
    if due:
        data["dueDate"] = date_input_to_iso(due)
    elif clear_due_date:
        data["dueDate"] = None
    return data


def task_form_values(task: Task) -> Dict[str, str]:
    return {
        "title": task.title,
        "description": task.description or "",
        "categoryId": task.category_id,
        "priority": task.priority,
        "status": task.status,
        "dueDate": date_input_value(task.due_date),
    }


class PageMixin(RepositoryMixin):
    def store_failure(self, request, message: str):
        """Log the active RepositoryError and render a fixed 500 page."""
        logger.exception(message)
        return render(request, "tasks/error.html", {"message": message}, status=500)


class TaskListPage(PageMixin, View):
    template_name = "tasks/task_list.html"

    def get(self, request):
        status = request.GET.get("status")
        category_id = request.GET.get("categoryId")

        where = {}
        result = validate_query({"status": status or "", "categoryId": category_id or ""})
        if result.ok:
            where = build_filter(result.data)
        else:
            logger.debug("Ignoring invalid list filters: %s", result.errors)

        repository = self.get_repository()
        try:
            tasks = repository.list_tasks(where, DEFAULT_TASK_ORDERING)
            categories = repository.list_categories(CATEGORY_ORDERING)
        except RepositoryError:
            return self.store_failure(request, "Failed to fetch tasks")

        context = {
            "tasks": tasks,
            "categories": categories,
            "statuses": Task.Status.choices,
            "has_filters": bool(where),
            "selected_status": where.get("status", ""),
            "selected_category": where.get("category_id", ""),
        }
        return render(request, self.template_name, context)


class TaskDetailPage(PageMixin, View):
    template_name = "tasks/task_detail.html"

    def get(self, request, task_id):
        try:
            task = self.get_repository().find_task_by_id(task_id)
        except RepositoryError:
            return self.store_failure(request, "Failed to fetch task")
        if task is None:
            raise Http404(TASK_NOT_FOUND)
        return render(request, self.template_name, {"task": task})


class TaskFormPage(PageMixin, View):
    template_name = "tasks/task_form.html"

    def render_form(self, request, form, task=None, error=None, status=200):
        try:
            categories = self.get_repository().list_categories(CATEGORY_ORDERING)
        except RepositoryError:
            return self.store_failure(request, "Failed to fetch categories")
        context = {
            "form": form,
            "task": task,
            "error": error,
            "categories": categories,
            "statuses": Task.Status.choices,
            "priorities": Task.Priority.choices,
        }
        return render(request, self.template_name, context, status=status)


class TaskCreatePage(TaskFormPage):
    def get(self, request):
        form = {"priority": Task.Priority.MEDIUM, "status": Task.Status.TODO}
        return self.render_form(request, form)

    def post(self, request):
        result = validate_create(form_payload(request.POST, clear_due_date=False))
        if not result.ok:
            return self.render_form(request, request.POST, error=result.message, status=400)

        try:
            self.get_repository().create_task(result.data)
        except RepositoryError:
            logger.exception("Creating task from form failed")
            return self.render_form(request, request.POST, error="Failed to create task", status=500)
        return redirect("task-list-page")


class TaskEditPage(TaskFormPage):
    def get_task(self, task_id):
        task = self.get_repository().find_task_by_id(task_id)
        if task is None:
            raise Http404(TASK_NOT_FOUND)
        return task

    def get(self, request, task_id):
        try:
            task = self.get_task(task_id)
        except RepositoryError:
            return self.store_failure(request, "Failed to fetch task")
        return self.render_form(request, task_form_values(task), task=task)

    def post(self, request, task_id):
        result = validate_update(form_payload(request.POST, clear_due_date=True))
        try:
            task = self.get_task(task_id)
        except RepositoryError:
            return self.store_failure(request, "Failed to fetch task")
        if not result.ok:
            return self.render_form(request, request.POST, task=task, error=result.message, status=400)

        try:
            self.get_repository().update_task(task_id, result.data)
        except RepositoryError:
            logger.exception("Updating task %s from form failed", task_id)
            return self.render_form(
                request, request.POST, task=task, error="Failed to update task", status=500
            )
        return redirect("task-list-page")
