from datetime import datetime, timezone as dt_timezone
from unittest import mock

from django.test import SimpleTestCase
from rest_framework.test import APIRequestFactory

from ..filters import CATEGORY_ORDERING, DEFAULT_TASK_ORDERING
from ..models import Category, Task
from ..repository import RepositoryError, TaskRepository
from ..views import TaskDetailView, TaskListView

UTC = dt_timezone.utc

INVENTORY = Category(id="cat-1", name="Inventory", color="#3b82f6", icon="package")
DISPLAY = Category(id="cat-2", name="Display", color="#8b5cf6", icon="layout")


def make_task(**overrides):
    fields = {
        "id": "task-1",
        "title": "Restock winter coats",
        "description": None,
        "status": "todo",
        "priority": "high",
        "due_date": datetime(2026, 4, 1, tzinfo=UTC),
        "category": INVENTORY,
        "created_at": datetime(2026, 1, 1, tzinfo=UTC),
        "updated_at": datetime(2026, 1, 1, tzinfo=UTC),
    }
    fields.update(overrides)
    return Task(**fields)


class ApiViewTestCase(SimpleTestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.repository = mock.Mock(spec=TaskRepository)


class TaskListViewTests(ApiViewTestCase):
    def setUp(self):
        super().setUp()
        self.repository.list_tasks.return_value = [
            make_task(),
            make_task(
                id="task-2",
                title="Update display window",
                description="Spring theme",
                status="in_progress",
                priority="medium",
                due_date=None,
                category=DISPLAY,
            ),
        ]
        self.repository.list_categories.return_value = [DISPLAY, INVENTORY]
        self.view = TaskListView.as_view(repository=self.repository)

    def get(self, params=None):
        return self.view(self.factory.get("/api/tasks/", params or {}))

    def test_unfiltered_list(self):
        response = self.get()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["tasks"]), 2)
        self.assertEqual([c["name"] for c in response.data["categories"]], ["Display", "Inventory"])
        self.repository.list_tasks.assert_called_once_with({}, DEFAULT_TASK_ORDERING)
        self.repository.list_categories.assert_called_once_with(CATEGORY_ORDERING)

    def test_dates_are_iso_strings(self):
        tasks = self.get().data["tasks"]
        self.assertEqual(tasks[0]["dueDate"], "2026-04-01T00:00:00.000Z")
        self.assertEqual(tasks[0]["createdAt"], "2026-01-01T00:00:00.000Z")
        self.assertIsNone(tasks[1]["dueDate"])

    def test_tasks_include_their_category(self):
        task = self.get().data["tasks"][0]
        self.assertEqual(
            dict(task["category"]),
            {"id": "cat-1", "name": "Inventory", "color": "#3b82f6", "icon": "package"},
        )

    def test_filters_are_passed_to_the_store(self):
        response = self.get({"status": "todo", "categoryId": "cat-1"})
        self.assertEqual(response.status_code, 200)
        self.repository.list_tasks.assert_called_once_with(
            {"status": "todo", "category_id": "cat-1"}, DEFAULT_TASK_ORDERING
        )

    def test_empty_filters_are_ignored(self):
        self.get({"status": "", "categoryId": ""})
        self.repository.list_tasks.assert_called_once_with({}, DEFAULT_TASK_ORDERING)

    def test_invalid_status_is_rejected(self):
        response = self.get({"status": "invalid"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"error": "Invalid query parameters"})
        self.repository.list_tasks.assert_not_called()

    def test_empty_store(self):
        self.repository.list_tasks.return_value = []
        self.repository.list_categories.return_value = []
        response = self.get()
        self.assertEqual(response.data["tasks"], [])
        self.assertEqual(response.data["categories"], [])

    def test_store_failure(self):
        self.repository.list_tasks.side_effect = RepositoryError("down")
        with self.assertLogs("tasks.views", level="ERROR"):
            response = self.get()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"error": "Failed to fetch tasks"})


class TaskCreateViewTests(ApiViewTestCase):
    def setUp(self):
        super().setUp()
        self.view = TaskListView.as_view(repository=self.repository)

    def post(self, data, **kwargs):
        if kwargs:
            request = self.factory.post("/api/tasks/", data, **kwargs)
        else:
            request = self.factory.post("/api/tasks/", data, format="json")
        return self.view(request)

    def test_minimal_body_creates_a_todo_without_due_date(self):
        self.repository.create_task.return_value = make_task(due_date=None, priority="high")
        response = self.post({"title": "Restock winter coats", "categoryId": "cat-1", "priority": "high"})

        self.assertEqual(response.status_code, 201)
        data = self.repository.create_task.call_args.args[0]
        self.assertEqual(data["status"], "todo")
        self.assertIsNone(data.get("due_date"))
        self.assertEqual(data["category_id"], "cat-1")
        self.assertEqual(response.data["task"]["status"], "todo")
        self.assertIsNone(response.data["task"]["dueDate"])

    def test_malformed_json(self):
        response = self.post("{not json", content_type="application/json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"error": "Invalid JSON body"})
        self.repository.create_task.assert_not_called()

    def test_non_json_content_type(self):
        response = self.post("title=x", content_type="application/x-www-form-urlencoded")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"error": "Invalid JSON body"})

    def test_first_validation_message_is_returned(self):
        response = self.post({"title": "", "categoryId": "", "priority": "high"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"error": "Title is required"})

    def test_invalid_date(self):
        response = self.post(
            {"title": "t", "categoryId": "c1", "priority": "high", "dueDate": "not-a-date"}
        )
        self.assertEqual(response.data, {"error": "Invalid date format"})

    def test_store_failure(self):
        self.repository.create_task.side_effect = RepositoryError("fk")
        with self.assertLogs("tasks.views", level="ERROR"):
            response = self.post({"title": "t", "categoryId": "missing", "priority": "low"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"error": "Failed to create task"})


class TaskDetailViewTests(ApiViewTestCase):
    valid_update = {
        "title": "Updated task",
        "categoryId": "cat-2",
        "priority": "medium",
        "status": "in_progress",
    }

    def setUp(self):
        super().setUp()
        self.view = TaskDetailView.as_view(repository=self.repository)

    def get(self, task_id):
        return self.view(self.factory.get(f"/api/tasks/{task_id}/"), task_id=task_id)

    def put(self, task_id, data, **kwargs):
        kwargs = kwargs or {"format": "json"}
        return self.view(self.factory.put(f"/api/tasks/{task_id}/", data, **kwargs), task_id=task_id)

    def test_get_existing(self):
        self.repository.find_task_by_id.return_value = make_task()
        response = self.get("task-1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["task"]["id"], "task-1")

    def test_get_missing(self):
        self.repository.find_task_by_id.return_value = None
        response = self.get("nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"error": "Task not found"})

    def test_get_store_failure(self):
        self.repository.find_task_by_id.side_effect = RepositoryError("down")
        with self.assertLogs("tasks.views", level="ERROR"):
            response = self.get("task-1")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"error": "Failed to fetch task"})

    def test_put_missing_task_never_updates(self):
        self.repository.find_task_by_id.return_value = None
        response = self.put("nope", self.valid_update)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"error": "Task not found"})
        self.repository.update_task.assert_not_called()

    def test_put_replaces_fields(self):
        self.repository.find_task_by_id.return_value = make_task()
        self.repository.update_task.return_value = make_task(
            title="Updated task", status="in_progress", priority="medium", due_date=None, category=DISPLAY
        )
        response = self.put("task-1", self.valid_update)

        self.assertEqual(response.status_code, 200)
        task_id, data = self.repository.update_task.call_args.args
        self.assertEqual(task_id, "task-1")
        self.assertIsNone(data["due_date"])
        self.assertEqual(data["status"], "in_progress")
        self.assertEqual(response.data["task"]["categoryId"], "cat-2")

    def test_put_validation_runs_before_lookup(self):
        response = self.put("task-1", {**self.valid_update, "status": "archived"})
        self.assertEqual(response.status_code, 400)
        self.repository.find_task_by_id.assert_not_called()

    def test_put_requires_status(self):
        body = {k: v for k, v in self.valid_update.items() if k != "status"}
        response = self.put("task-1", body)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"error": "Status is required"})

    def test_put_malformed_json(self):
        response = self.put("task-1", "{", content_type="application/json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"error": "Invalid JSON body"})

    def test_put_store_failure(self):
        self.repository.find_task_by_id.return_value = make_task()
        self.repository.update_task.side_effect = RepositoryError("down")
        with self.assertLogs("tasks.views", level="ERROR"):
            response = self.put("task-1", self.valid_update)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"error": "Failed to update task"})
