"""URL configuration for the group dashboard."""

from django.urls import path

from . import dashboard

app_name = "dashboard"  # pylint: disable=invalid-name

urlpatterns = [
    path(
        "group/<int:group_id>/events/<int:event_id>/",
        dashboard.EventUpdateActionView.as_view(),
        name="event-update",
    ),
    path(
        "group/<int:group_id>/events/<int:event_id>/submissions/",
        dashboard.CfsSubmissionListPageView.as_view(),
        name="submissions",
    ),
    path(
        "group/<int:group_id>/events/<int:event_id>/submissions/<int:submission_id>/",
        dashboard.CfsSubmissionUpdateActionView.as_view(),
        name="submission-update",
    ),
]
