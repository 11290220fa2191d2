# views.py
import logging
from typing import Any, Optional, Tuple

from rest_framework import status
from rest_framework.exceptions import ParseError, UnsupportedMediaType
from rest_framework.response import Response
from rest_framework.views import APIView

from .filters import CATEGORY_ORDERING, DEFAULT_TASK_ORDERING, build_filter
from .repository import RepositoryError, TaskRepository
from .serializers import (
    CategorySummarySerializer,
    TaskSerializer,
    validate_create,
    validate_query,
    validate_update,
)

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"
INVALID_JSON = "Invalid JSON body"
INVALID_QUERY = "Invalid query parameters"


def error_response(message: str, code: int) -> Response:
    """Every error body has the shape {"error": message}."""
    return Response({"error": message}, status=code)


def read_json_body(request) -> Tuple[Optional[Any], Optional[Response]]:
    """Parse the request body before any validation runs.

    Returns (data, None) on success, or (None, 400 response) when the body is
    not parseable JSON.
    """
    try:
        return request.data, None
    except (ParseError, UnsupportedMediaType):
        return None, error_response(INVALID_JSON, status.HTTP_400_BAD_REQUEST)


class RepositoryMixin:
    # injected through as_view(repository=...)
    repository: Optional[TaskRepository] = None

    def get_repository(self) -> TaskRepository:
        if self.repository is None:
            self.repository = TaskRepository()
        return self.repository


class TaskListView(RepositoryMixin, APIView):
    """
    GET  /api/tasks/  list tasks (optionally filtered by status / categoryId)
                      together with every category.
    POST /api/tasks/  create a task.
    """

    def get(self, request):
        result = validate_query(request.query_params.dict())
        if not result.ok:
            return error_response(INVALID_QUERY, status.HTTP_400_BAD_REQUEST)

        repository = self.get_repository()
        try:
            tasks = repository.list_tasks(build_filter(result.data), DEFAULT_TASK_ORDERING)
            categories = repository.list_categories(CATEGORY_ORDERING)
        except RepositoryError:
            logger.exception("Listing tasks failed")
            return error_response("Failed to fetch tasks", status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(
            {
                "tasks": TaskSerializer(tasks, many=True).data,
                "categories": CategorySummarySerializer(categories, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    def post(self, request):
        body, bad_body = read_json_body(request)
        if bad_body is not None:
            return bad_body

        result = validate_create(body)
        if not result.ok:
            return error_response(result.message, status.HTTP_400_BAD_REQUEST)

        try:
            task = self.get_repository().create_task(result.data)
        except RepositoryError:
            logger.exception("Creating task failed")
            return error_response("Failed to create task", status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"task": TaskSerializer(task).data}, status=status.HTTP_201_CREATED)


class TaskDetailView(RepositoryMixin, APIView):
    """
    GET /api/tasks/<id>/  fetch one task.
    PUT /api/tasks/<id>/  replace the task's mutable fields.
    """

    def get(self, request, task_id: str):
        try:
            task = self.get_repository().find_task_by_id(task_id)
        except RepositoryError:
            logger.exception("Fetching task %s failed", task_id)
            return error_response("Failed to fetch task", status.HTTP_500_INTERNAL_SERVER_ERROR)

        if task is None:
            return error_response(TASK_NOT_FOUND, status.HTTP_404_NOT_FOUND)
        return Response({"task": TaskSerializer(task).data}, status=status.HTTP_200_OK)

    def put(self, request, task_id: str):
        body, bad_body = read_json_body(request)
        if bad_body is not None:
            return bad_body

        result = validate_update(body)
        if not result.ok:
            return error_response(result.message, status.HTTP_400_BAD_REQUEST)

        repository = self.get_repository()
        try:
            # not atomic with the update below; a concurrent delete can slip in between
            if repository.find_task_by_id(task_id) is None:
                return error_response(TASK_NOT_FOUND, status.HTTP_404_NOT_FOUND)
            task = repository.update_task(task_id, result.data)
        except RepositoryError:
            logger.exception("Updating task %s failed", task_id)
            return error_response("Failed to update task", status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"task": TaskSerializer(task).data}, status=status.HTTP_200_OK)
