import json
from datetime import UTC
from http import HTTPStatus

import pytest
from django.urls import reverse

from convenimus.adapters.db.django.models import (
    CfsSubmission,
    CfsSubmissionStatus,
    Event,
)
from tests.integration.conftest import (
    CfsSubmissionFactory,
    EventCfsLabelFactory,
    EventFactory,
    GroupFactory,
)
from tests.integration.factories import UserFactory
from tests.integration.utils import assert_json_response


def _submission_url(submission):
    return reverse(
        "dashboard:submission-update",
        kwargs={
            "group_id": submission.event.group_id,
            "event_id": submission.event_id,
            "submission_id": submission.pk,
        },
    )


def _event_url(event):
    return reverse(
        "dashboard:event-update",
        kwargs={"group_id": event.group_id, "event_id": event.pk},
    )


def _list_url(event):
    return reverse(
        "dashboard:submissions",
        kwargs={"group_id": event.group_id, "event_id": event.pk},
    )


def _isoformat(value):
    return value.astimezone(UTC).replace(tzinfo=None).isoformat()


def _event_body(event, **overrides):
    body = {
        "capacity": event.capacity,
        "description": event.description,
        "ends_at": _isoformat(event.ends_at),
        "kind": event.kind,
        "name": event.name,
        "starts_at": _isoformat(event.starts_at),
        "timezone": event.timezone,
    }
    body.update(overrides)
    return json.dumps(body)


def _post_json(client, url, payload):
    return client.post(url, json.dumps(payload), content_type="application/json")


class TestCfsSubmissionUpdateActionView:
    def test_anonymous_user_is_forbidden(self, client, submission):
        response = _post_json(client, _submission_url(submission), {})

        assert response.status_code == HTTPStatus.FORBIDDEN

    def test_non_team_member_is_forbidden(self, client, submission, speaker):
        client.force_login(speaker)

        response = _post_json(
            client, _submission_url(submission), {"status_id": "approved"}
        )

        assert response.status_code == HTTPStatus.FORBIDDEN
        submission.refresh_from_db()
        assert submission.status == CfsSubmissionStatus.NOT_REVIEWED

    def test_approve_notifies_speaker(self, reviewer_client, reviewer, submission):
        response = _post_json(
            reviewer_client, _submission_url(submission), {"status_id": "approved"}
        )

        assert_json_response(response, HTTPStatus.OK, notify_speaker=True)
        submission.refresh_from_db()
        assert submission.status == CfsSubmissionStatus.APPROVED
        assert submission.reviewed_by == reviewer

    def test_rating_only_does_not_notify(self, reviewer_client, submission):
        response = _post_json(
            reviewer_client,
            _submission_url(submission),
            {"rating_stars": 5, "rating_comment": "Great"},
        )

        assert_json_response(response, HTTPStatus.OK, notify_speaker=False)
        assert submission.ratings.get().stars == 5  # noqa: PLR2004

    def test_withdrawn_target_is_conflict(self, reviewer_client, submission):
        response = _post_json(
            reviewer_client, _submission_url(submission), {"status_id": "withdrawn"}
        )

        assert_json_response(
            response, HTTPStatus.CONFLICT, error="invalid submission status"
        )

    def test_withdrawn_submission_is_not_found(self, reviewer_client, submission):
        CfsSubmission.objects.filter(pk=submission.pk).update(
            status=CfsSubmissionStatus.WITHDRAWN
        )

        response = _post_json(
            reviewer_client, _submission_url(submission), {"status_id": "approved"}
        )

        assert_json_response(
            response, HTTPStatus.NOT_FOUND, error="submission not found"
        )

    def test_invalid_json_is_unprocessable(self, reviewer_client, submission):
        response = reviewer_client.post(
            _submission_url(submission), "{", content_type="application/json"
        )

        assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
        assert response.json()["error"].startswith("invalid payload")

    def test_bad_stars_are_unprocessable(self, reviewer_client, submission):
        response = _post_json(
            reviewer_client, _submission_url(submission), {"rating_stars": 9}
        )

        assert_json_response(
            response, HTTPStatus.UNPROCESSABLE_ENTITY, error="invalid rating stars"
        )

    def test_boolean_stars_are_unprocessable(self, reviewer_client, submission):
        response = _post_json(
            reviewer_client, _submission_url(submission), {"rating_stars": True}
        )

        assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
        assert response.json()["error"].startswith("invalid payload (rating_stars")
        assert not submission.ratings.exists()

    def test_event_of_another_group_is_not_found(
        self, reviewer_client, group
    ):
        foreign = CfsSubmissionFactory(
            event=EventFactory(group=GroupFactory(community=group.community))
        )
        url = reverse(
            "dashboard:submission-update",
            kwargs={
                "group_id": group.pk,
                "event_id": foreign.event_id,
                "submission_id": foreign.pk,
            },
        )

        response = _post_json(reviewer_client, url, {"status_id": "approved"})

        assert_json_response(response, HTTPStatus.NOT_FOUND, error="event not found")

    def test_rejection_is_logged(self, reviewer_client, submission, caplog):
        _post_json(
            reviewer_client, _submission_url(submission), {"status_id": "withdrawn"}
        )

        assert "Dashboard request rejected (409)" in caplog.text


class TestCfsSubmissionListPageView:
    def test_lists_submissions(self, reviewer_client, event, submission):
        label = EventCfsLabelFactory(event=event, name="Web")
        approved = CfsSubmissionFactory(
            event=event, status=CfsSubmissionStatus.APPROVED
        )
        approved.labels.add(label)

        response = reviewer_client.get(_list_url(event))

        assert response.status_code == HTTPStatus.OK
        data = response.json()
        assert data["total_count"] == 2  # noqa: PLR2004
        assert data["filtered_count"] == 2  # noqa: PLR2004
        assert data["status_counts"]["approved"] == 1
        assert [status["status"] for status in data["statuses"]] == [
            "approved",
            "information-requested",
            "not-reviewed",
            "rejected",
        ]

    def test_filters_by_status_and_label(self, reviewer_client, event, submission):
        label = EventCfsLabelFactory(event=event, name="Web")
        approved = CfsSubmissionFactory(
            event=event, status=CfsSubmissionStatus.APPROVED
        )
        approved.labels.add(label)

        response = reviewer_client.get(
            _list_url(event), {"status": "approved", "label": label.pk}
        )

        data = response.json()
        assert data["filtered_count"] == 1
        assert [summary["item"]["pk"] for summary in data["submissions"]] == [
            approved.pk
        ]

    def test_bad_page_is_unprocessable(self, reviewer_client, event):
        response = reviewer_client.get(_list_url(event), {"page": "first"})

        assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY

    def test_empty_page_size_is_unprocessable(self, reviewer_client, event):
        response = reviewer_client.get(_list_url(event), {"page_size": 0})

        assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
        assert response.json()["error"].startswith("invalid payload (page_size")

    def test_event_of_another_group_is_not_found(self, reviewer_client, group):
        foreign = EventFactory(group=GroupFactory(community=group.community))
        url = reverse(
            "dashboard:submissions",
            kwargs={"group_id": group.pk, "event_id": foreign.pk},
        )

        response = reviewer_client.get(url)

        assert_json_response(response, HTTPStatus.NOT_FOUND, error="event not found")


class TestEventUpdateActionView:
    def test_updates_event(self, reviewer_client, event):
        response = reviewer_client.put(
            _event_url(event),
            _event_body(event, name="Spring sprint", capacity=40),
            content_type="application/json",
        )

        assert response.status_code == HTTPStatus.NO_CONTENT
        event.refresh_from_db()
        assert event.name == "Spring sprint"
        assert event.capacity == 40  # noqa: PLR2004

    def test_capacity_below_attendees_is_unprocessable(
        self, reviewer_client, event, community
    ):
        event.attendees.add(UserFactory(community=community))

        response = reviewer_client.put(
            _event_url(event),
            _event_body(event, capacity=0),
            content_type="application/json",
        )

        assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
        assert "registered attendees (1)" in response.json()["error"]

    def test_missing_name_is_unprocessable(self, reviewer_client, event):
        body = json.loads(_event_body(event))
        del body["name"]

        response = reviewer_client.put(
            _event_url(event), json.dumps(body), content_type="application/json"
        )

        assert_json_response(
            response,
            HTTPStatus.UNPROCESSABLE_ENTITY,
            error="invalid payload (name: Field required)",
        )

    def test_canceled_event_is_not_found(self, reviewer_client, event):
        Event.objects.filter(pk=event.pk).update(canceled=True)

        response = reviewer_client.put(
            _event_url(event), _event_body(event), content_type="application/json"
        )

        assert_json_response(
            response, HTTPStatus.NOT_FOUND, error="event not found or inactive"
        )

    @pytest.mark.parametrize("method", ["get", "post", "delete"])
    def test_other_methods_are_not_allowed(self, reviewer_client, event, method):
        response = getattr(reviewer_client, method)(_event_url(event))

        assert response.status_code == HTTPStatus.METHOD_NOT_ALLOWED
