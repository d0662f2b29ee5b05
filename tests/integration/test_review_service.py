import pytest

from convenimus.adapters.db.django.models import (
    CfsSubmission,
    CfsSubmissionRating,
    CfsSubmissionStatus,
)
from convenimus.links.db.django.uow import UnitOfWork
from convenimus.mills import CfsSubmissionReviewService
from convenimus.pacts import InvalidTransitionError, NotFoundError, ValidationError
from tests.integration.conftest import (
    CfsSubmissionFactory,
    EventCfsLabelFactory,
    EventFactory,
    SessionFactory,
)


@pytest.fixture(name="service")
def service_fixture():
    return CfsSubmissionReviewService(UnitOfWork())


def _update(service, reviewer, submission, payload):
    return service.update_submission(
        reviewer.pk, submission.event_id, submission.pk, payload
    )


class TestUpdateSubmission:
    def test_request_information_then_relabel(
        self, service, reviewer, submission, event
    ):
        label = EventCfsLabelFactory(event=event, name="L2")

        first = _update(
            service,
            reviewer,
            submission,
            {
                "status_id": "information-requested",
                "action_required_message": "Need more info",
            },
        )
        second = _update(service, reviewer, submission, {"label_ids": [label.pk]})

        assert first is True
        assert second is False
        submission.refresh_from_db()
        assert submission.status == CfsSubmissionStatus.INFORMATION_REQUESTED
        assert submission.action_required_message == "Need more info"
        assert submission.reviewed_by == reviewer
        assert submission.updated_at is not None
        assert list(submission.labels.all()) == [label]

    def test_label_ids_replace_existing_labels(self, service, reviewer, submission):
        old = EventCfsLabelFactory(event=submission.event, name="Old")
        kept = EventCfsLabelFactory(event=submission.event, name="Kept")
        new = EventCfsLabelFactory(event=submission.event, name="New")
        submission.labels.add(old, kept)

        _update(service, reviewer, submission, {"label_ids": [kept.pk, new.pk]})

        assert set(submission.labels.all()) == {kept, new}

    def test_absent_label_ids_keep_labels(self, service, reviewer, submission):
        label = EventCfsLabelFactory(event=submission.event, name="Web")
        submission.labels.add(label)

        _update(service, reviewer, submission, {"status_id": "approved"})

        assert list(submission.labels.all()) == [label]

    def test_same_rating_twice_keeps_one_row(self, service, reviewer, submission):
        for __ in range(2):
            _update(
                service,
                reviewer,
                submission,
                {"rating_stars": 4, "rating_comment": "Good fit"},
            )

        rating = CfsSubmissionRating.objects.get(
            cfs_submission=submission, reviewer=reviewer
        )
        assert rating.stars == 4  # noqa: PLR2004
        assert rating.comments == "Good fit"
        assert CfsSubmissionRating.objects.count() == 1

    def test_zero_stars_removes_rating_idempotently(
        self, service, reviewer, submission
    ):
        _update(service, reviewer, submission, {"rating_stars": 3})

        first = _update(service, reviewer, submission, {"rating_stars": 0})
        second = _update(service, reviewer, submission, {"rating_stars": 0})

        assert first is False
        assert second is False
        assert not CfsSubmissionRating.objects.exists()

    def test_ratings_are_per_reviewer(self, service, reviewer, submission, user):
        _update(service, reviewer, submission, {"rating_stars": 5})
        _update(service, user, submission, {"rating_stars": 2})

        _update(service, reviewer, submission, {"rating_stars": 0})

        assert list(
            CfsSubmissionRating.objects.values_list("reviewer_id", "stars")
        ) == [(user.pk, 2)]

    def test_rejects_withdrawn_submission(self, service, reviewer, submission):
        CfsSubmission.objects.filter(pk=submission.pk).update(
            status=CfsSubmissionStatus.WITHDRAWN
        )

        with pytest.raises(NotFoundError, match="submission not found"):
            _update(service, reviewer, submission, {"status_id": "approved"})

    def test_rejects_submission_of_another_event(self, service, reviewer, submission):
        other_event = EventFactory(group=submission.event.group)

        with pytest.raises(NotFoundError, match="submission not found"):
            service.update_submission(
                reviewer.pk, other_event.pk, submission.pk, {"status_id": "approved"}
            )

    def test_rejects_withdrawn_target_status(self, service, reviewer, submission):
        with pytest.raises(InvalidTransitionError, match="invalid submission status"):
            _update(service, reviewer, submission, {"status_id": "withdrawn"})

        submission.refresh_from_db()
        assert submission.status == CfsSubmissionStatus.NOT_REVIEWED

    def test_linked_submission_must_remain_approved(
        self, service, reviewer, submission
    ):
        CfsSubmission.objects.filter(pk=submission.pk).update(
            status=CfsSubmissionStatus.APPROVED
        )
        SessionFactory(event=submission.event, cfs_submission=submission)

        with pytest.raises(
            InvalidTransitionError, match="linked submissions must remain approved"
        ):
            _update(
                service,
                reviewer,
                submission,
                {"status_id": "rejected", "rating_stars": 2},
            )

        submission.refresh_from_db()
        assert submission.status == CfsSubmissionStatus.APPROVED
        assert not CfsSubmissionRating.objects.exists()

    def test_rejects_out_of_range_stars(self, service, reviewer, submission):
        with pytest.raises(ValidationError, match="invalid rating stars"):
            _update(
                service,
                reviewer,
                submission,
                {"status_id": "approved", "rating_stars": 6},
            )

        submission.refresh_from_db()
        assert submission.status == CfsSubmissionStatus.NOT_REVIEWED

    def test_rejects_labels_of_another_event(self, service, reviewer, submission):
        foreign = EventCfsLabelFactory(
            event=EventFactory(group=submission.event.group), name="Foreign"
        )

        with pytest.raises(ValidationError, match="invalid event CFS labels"):
            _update(service, reviewer, submission, {"label_ids": [foreign.pk]})

        assert not submission.labels.exists()


class TestListSubmissions:
    def test_lists_event_submissions(self, service, reviewer, submission, event):
        withdrawn = CfsSubmissionFactory(
            event=event, status=CfsSubmissionStatus.WITHDRAWN
        )
        approved = CfsSubmissionFactory(
            event=event, status=CfsSubmissionStatus.APPROVED
        )
        label = EventCfsLabelFactory(event=event, name="Web")
        approved.labels.add(label)
        _update(service, reviewer, submission, {"rating_stars": 4})

        result = service.list_submissions(event.pk, reviewer_id=reviewer.pk)

        listed = {summary.item.pk: summary for summary in result.submissions}
        assert withdrawn.pk not in listed
        assert set(listed) == {submission.pk, approved.pk}
        assert result.status_counts["approved"] == 1
        assert result.status_counts["not-reviewed"] == 1
        assert listed[approved.pk].item.label_ids == [label.pk]
        assert listed[submission.pk].item.speaker_name == "Ada Lovelace"
        assert listed[submission.pk].item.title == submission.session_proposal.title
        assert listed[submission.pk].my_rating.stars == 4  # noqa: PLR2004
        assert listed[approved.pk].my_rating is None

    def test_recently_reviewed_first(self, service, reviewer, submission, event):
        other = CfsSubmissionFactory(event=event)
        _update(service, reviewer, submission, {"status_id": "approved"})

        result = service.list_submissions(event.pk)

        assert [summary.item.pk for summary in result.submissions] == [
            submission.pk,
            other.pk,
        ]
