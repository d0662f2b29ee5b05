"""URL configuration for convenimus project."""

from django.urls import include, path

urlpatterns = [
    path(
        "dashboard/",
        include("convenimus.gates.web.django.urls", namespace="dashboard"),
    ),
]
