from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path("", RedirectView.as_view(pattern_name="task-list-page", permanent=False)),
    path("", include("tasks.urls")),
]
