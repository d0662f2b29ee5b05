"""Group dashboard JSON endpoints (gates layer)."""

from __future__ import annotations

import logging
from datetime import timedelta
from http import HTTPStatus
from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth.mixins import LoginRequiredMixin, UserPassesTestMixin
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.generic.base import View
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from convenimus.mills import (
    CfsSubmissionReviewService,
    EventUpdateService,
    list_cfs_submission_statuses_for_review,
)
from convenimus.pacts import (
    CfsSubmissionListFilters,
    CfsSubmissionUpdateData,
    ConstraintViolationError,
    ConvenimusError,
    EventUpdateData,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from convenimus.pacts import UnitOfWorkProtocol

logger = logging.getLogger(__name__)

ERROR_STATUSES: dict[type[ConvenimusError], HTTPStatus] = {
    NotFoundError: HTTPStatus.NOT_FOUND,
    InvalidTransitionError: HTTPStatus.CONFLICT,
    ValidationError: HTTPStatus.UNPROCESSABLE_ENTITY,
    ConstraintViolationError: HTTPStatus.BAD_REQUEST,
}

submission_update_adapter = TypeAdapter(CfsSubmissionUpdateData)
submission_filters_adapter = TypeAdapter(CfsSubmissionListFilters)
event_update_adapter = TypeAdapter(EventUpdateData)


class DashboardRequest(HttpRequest):
    """Request type for dashboard views with UoW."""

    uow: UnitOfWorkProtocol


def error_response(error: ConvenimusError) -> JsonResponse:
    status = next(
        status
        for error_type, status in ERROR_STATUSES.items()
        if isinstance(error, error_type)
    )
    logger.warning("Dashboard request rejected (%s): %s", status.value, error.message)
    return JsonResponse({"error": error.message}, status=status)


def parse_payload[T](adapter: TypeAdapter[T], data: bytes | dict) -> T:
    """Validate request data against a payload type.

    Returns:
        The validated payload.

    Raises:
        ValidationError: describing the first invalid field.
    """
    try:
        if isinstance(data, bytes):
            return adapter.validate_json(data or b"{}")
        return adapter.validate_python(data)
    except PydanticValidationError as exception:
        error = exception.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        message = f"{location}: {error['msg']}" if location else error["msg"]
        raise ValidationError(f"invalid payload ({message})") from exception


class TeamMemberMixin(LoginRequiredMixin, UserPassesTestMixin):
    """Mixin to require membership in the team of the group from the URL."""

    raise_exception = True
    request: DashboardRequest
    kwargs: dict[str, int]

    def test_func(self) -> bool:
        return self.request.uow.groups.is_team_member(
            self.kwargs["group_id"], self.request.user.pk
        )

    def ensure_event(self, group_id: int, event_id: int) -> None:
        if not self.request.uow.events.belongs_to_group(event_id, group_id):
            raise NotFoundError("event not found")


class CfsSubmissionListPageView(TeamMemberMixin, View):
    """Submissions of an event, with review statuses and rating summaries."""

    http_method_names = ("get",)

    def get(
        self, _request: DashboardRequest, group_id: int, event_id: int
    ) -> HttpResponse:
        query = self.request.GET
        raw_filters: dict[str, object] = {
            "label_ids": query.getlist("label"),
            "statuses": query.getlist("status"),
        }
        for key in ("page", "page_size", "sort"):
            if key in query:
                raw_filters[key] = query[key]

        try:
            self.ensure_event(group_id, event_id)
            filters = parse_payload(submission_filters_adapter, raw_filters)
            result = CfsSubmissionReviewService(self.request.uow).list_submissions(
                event_id, filters, reviewer_id=self.request.user.pk
            )
        except ConvenimusError as error:
            return error_response(error)

        return JsonResponse(
            {
                "filtered_count": result.filtered_count,
                "status_counts": result.status_counts,
                "statuses": [
                    status.model_dump(mode="json")
                    for status in list_cfs_submission_statuses_for_review()
                ],
                "submissions": [
                    summary.model_dump(mode="json") for summary in result.submissions
                ],
                "total_count": result.total_count,
            }
        )


class CfsSubmissionUpdateActionView(TeamMemberMixin, View):
    """Review decision on a single submission."""

    http_method_names = ("post",)

    def post(
        self,
        _request: DashboardRequest,
        group_id: int,
        event_id: int,
        submission_id: int,
    ) -> HttpResponse:
        try:
            self.ensure_event(group_id, event_id)
            payload = parse_payload(submission_update_adapter, self.request.body)
            notify_speaker = CfsSubmissionReviewService(
                self.request.uow
            ).update_submission(self.request.user.pk, event_id, submission_id, payload)
        except ConvenimusError as error:
            return error_response(error)

        return JsonResponse({"notify_speaker": notify_speaker})


class EventUpdateActionView(TeamMemberMixin, View):
    """Full replace of an event with its sessions, people and labels."""

    http_method_names = ("put",)

    def put(
        self, _request: DashboardRequest, group_id: int, event_id: int
    ) -> HttpResponse:
        service = EventUpdateService(
            self.request.uow,
            reminder_lookahead=timedelta(hours=settings.EVENT_REMINDER_LOOKAHEAD_HOURS),
        )
        try:
            payload = parse_payload(event_update_adapter, self.request.body)
            service.update_event(
                group_id,
                event_id,
                payload,
                cfg_max_participants=settings.MEETINGS_MAX_PARTICIPANTS,
            )
        except ConvenimusError as error:
            return error_response(error)

        return HttpResponse(status=HTTPStatus.NO_CONTENT)
