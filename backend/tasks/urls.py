from django.urls import path

from .pages import TaskCreatePage, TaskDetailPage, TaskEditPage, TaskListPage
from .repository import TaskRepository
from .views import TaskDetailView, TaskListView

repository = TaskRepository()

urlpatterns = [
    path("api/tasks/", TaskListView.as_view(repository=repository), name="task-list"),
    path("api/tasks/<str:task_id>/", TaskDetailView.as_view(repository=repository), name="task-detail"),
    path("tasks/", TaskListPage.as_view(repository=repository), name="task-list-page"),
    path("tasks/new/", TaskCreatePage.as_view(repository=repository), name="task-create-page"),
    path("tasks/<str:task_id>/", TaskDetailPage.as_view(repository=repository), name="task-detail-page"),
    path("tasks/<str:task_id>/edit/", TaskEditPage.as_view(repository=repository), name="task-edit-page"),
]
