from __future__ import annotations

from typing import TYPE_CHECKING

from django.db.models import F
from django.utils import timezone

from convenimus.adapters.db.django.models import (
    CfsSubmission,
    CfsSubmissionLabel,
    CfsSubmissionRating,
    Event,
    EventAttendee,
    EventCfsLabel,
    EventHost,
    EventSpeaker,
    EventSponsor,
    Group,
    GroupSponsor,
    Session,
    SessionSpeaker,
)
from convenimus.pacts import (
    CfsLabelData,
    CfsLabelRepositoryProtocol,
    CfsSubmissionDTO,
    CfsSubmissionListItemDTO,
    CfsSubmissionRatingDTO,
    CfsSubmissionRepositoryProtocol,
    CfsSubmissionStatus,
    EventCfsLabelDTO,
    EventData,
    EventDTO,
    EventRepositoryProtocol,
    GroupDTO,
    GroupRepositoryProtocol,
    NotFoundError,
    SessionData,
    SessionDTO,
    SessionRepositoryProtocol,
    SpeakerData,
    SponsorData,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from convenimus.adapters.db.django.models import User
    from convenimus.links.db.django.storage import Storage
else:
    from django.contrib.auth import get_user_model

    User = get_user_model()


class GroupRepository(GroupRepositoryProtocol):
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def read(self, group_id: int) -> GroupDTO:
        if not (group := self._storage.groups.get(group_id)):
            try:
                group = Group.objects.get(id=group_id)
            except Group.DoesNotExist as exception:
                raise NotFoundError("group not found") from exception
            self._storage.groups[group_id] = group

        return GroupDTO.model_validate(group)

    @staticmethod
    def is_team_member(group_id: int, user_id: int) -> bool:
        return User.objects.filter(id=user_id, team_groups__id=group_id).exists()

    @staticmethod
    def read_community_user_ids(community_id: int, user_ids: Iterable[int]) -> set[int]:
        return set(
            User.objects.filter(community_id=community_id, id__in=list(user_ids))
            .values_list("id", flat=True)
        )

    @staticmethod
    def read_sponsor_ids(group_id: int, sponsor_ids: Iterable[int]) -> set[int]:
        return set(
            GroupSponsor.objects.filter(group_id=group_id, id__in=list(sponsor_ids))
            .values_list("id", flat=True)
        )


class EventRepository(EventRepositoryProtocol):
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def read_active(self, group_id: int, event_id: int) -> EventDTO:
        """Read and lock an event that can still be edited.

        Returns:
            The event, if it belongs to the group and is neither canceled nor
            deleted.

        Raises:
            NotFoundError: otherwise.
        """
        try:
            event = Event.objects.select_for_update().get(
                id=event_id, group_id=group_id, canceled=False, deleted=False
            )
        except Event.DoesNotExist as exception:
            raise NotFoundError("event not found or inactive") from exception

        self._storage.events[event_id] = event

        return EventDTO.model_validate(event)

    @staticmethod
    def belongs_to_group(event_id: int, group_id: int) -> bool:
        return Event.objects.filter(id=event_id, group_id=group_id).exists()

    @staticmethod
    def read_host_ids(event_id: int) -> list[int]:
        return list(
            EventHost.objects.filter(event_id=event_id)
            .order_by("user_id")
            .values_list("user_id", flat=True)
        )

    @staticmethod
    def read_speakers(event_id: int) -> list[SpeakerData]:
        return [
            SpeakerData(featured=speaker.featured, user_id=speaker.user_id)
            for speaker in EventSpeaker.objects.filter(event_id=event_id).order_by(
                "user_id"
            )
        ]

    @staticmethod
    def count_attendees(event_id: int) -> int:
        return EventAttendee.objects.filter(event_id=event_id).count()

    def update(self, event_id: int, event_data: EventData) -> None:
        Event.objects.filter(id=event_id).update(**event_data)
        self._storage.events.pop(event_id, None)

    @staticmethod
    def set_hosts(event_id: int, user_ids: Iterable[int]) -> None:
        EventHost.objects.filter(event_id=event_id).delete()
        EventHost.objects.bulk_create(
            EventHost(event_id=event_id, user_id=user_id) for user_id in set(user_ids)
        )

    @staticmethod
    def set_speakers(event_id: int, speakers: Iterable[SpeakerData]) -> None:
        EventSpeaker.objects.filter(event_id=event_id).delete()
        EventSpeaker.objects.bulk_create(
            EventSpeaker(
                event_id=event_id,
                user_id=speaker["user_id"],
                featured=speaker.get("featured", False),
            )
            for speaker in speakers
        )

    @staticmethod
    def set_sponsors(event_id: int, sponsors: Iterable[SponsorData]) -> None:
        EventSponsor.objects.filter(event_id=event_id).delete()
        EventSponsor.objects.bulk_create(
            EventSponsor(
                event_id=event_id,
                group_sponsor_id=sponsor["group_sponsor_id"],
                level=sponsor["level"],
            )
            for sponsor in sponsors
        )


class SessionRepository(SessionRepositoryProtocol):
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def read_list(self, event_id: int) -> list[SessionDTO]:
        collection = self._storage.sessions_by_event[event_id]
        if not collection:
            for session in Session.objects.filter(event_id=event_id).order_by(
                "starts_at", "id"
            ):
                collection[session.pk] = session

        return [SessionDTO.model_validate(session) for session in collection.values()]

    def create(self, event_id: int, session_data: SessionData) -> int:
        session = Session.objects.create(event_id=event_id, **session_data)
        self._storage.sessions_by_event[event_id][session.pk] = session
        return session.pk

    def update(self, session_id: int, session_data: SessionData) -> None:
        Session.objects.filter(id=session_id).update(**session_data)
        for collection in self._storage.sessions_by_event.values():
            collection.pop(session_id, None)

    @staticmethod
    def set_speakers(session_id: int, speakers: Iterable[SpeakerData]) -> None:
        SessionSpeaker.objects.filter(session_id=session_id).delete()
        SessionSpeaker.objects.bulk_create(
            SessionSpeaker(
                session_id=session_id,
                user_id=speaker["user_id"],
                featured=speaker.get("featured", False),
            )
            for speaker in speakers
        )

    def delete_except(self, event_id: int, keep_ids: Iterable[int]) -> int:
        """Delete the event's sessions missing from ``keep_ids``.

        Meetings of deleted sessions stay behind, detached, for cleanup.

        Returns:
            Number of sessions deleted.
        """
        _, deleted = (
            Session.objects.filter(event_id=event_id)
            .exclude(id__in=list(keep_ids))
            .delete()
        )
        self._storage.sessions_by_event.pop(event_id, None)
        return deleted.get(Session._meta.label, 0)  # noqa: SLF001


class CfsLabelRepository(CfsLabelRepositoryProtocol):
    @staticmethod
    def read_list(event_id: int) -> list[EventCfsLabelDTO]:
        return [
            EventCfsLabelDTO.model_validate(label)
            for label in EventCfsLabel.objects.filter(event_id=event_id).order_by(
                "name"
            )
        ]

    @staticmethod
    def create(event_id: int, label_data: CfsLabelData) -> int:
        label = EventCfsLabel.objects.create(
            event_id=event_id, name=label_data["name"], color=label_data["color"]
        )
        return label.pk

    @staticmethod
    def update(label_id: int, label_data: CfsLabelData) -> None:
        EventCfsLabel.objects.filter(id=label_id).update(
            name=label_data["name"], color=label_data["color"]
        )

    @staticmethod
    def delete_except(event_id: int, keep_ids: Iterable[int]) -> int:
        _, deleted = (
            EventCfsLabel.objects.filter(event_id=event_id)
            .exclude(id__in=list(keep_ids))
            .delete()
        )
        return deleted.get(EventCfsLabel._meta.label, 0)  # noqa: SLF001


class CfsSubmissionRepository(CfsSubmissionRepositoryProtocol):
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def read_for_review(self, event_id: int, submission_id: int) -> CfsSubmissionDTO:
        """Read and lock a submission that is open for review.

        Returns:
            The submission, with ``linked_session_id`` filled in.

        Raises:
            NotFoundError: if the submission is missing, belongs to another
                event or was withdrawn.
        """
        try:
            submission = (
                CfsSubmission.objects.select_for_update(of=("self",))
                .annotate(linked_session_id=F("linked_session__id"))
                .exclude(status=CfsSubmissionStatus.WITHDRAWN)
                .get(id=submission_id, event_id=event_id)
            )
        except CfsSubmission.DoesNotExist as exception:
            raise NotFoundError("submission not found") from exception

        self._storage.cfs_submissions[submission_id] = submission

        return CfsSubmissionDTO.model_validate(submission)

    def update_review(
        self,
        submission_id: int,
        *,
        status: CfsSubmissionStatus,
        action_required_message: str | None,
        reviewed_by_id: int,
        updated_at: datetime,
    ) -> None:
        CfsSubmission.objects.filter(id=submission_id).update(
            status=status,
            action_required_message=action_required_message,
            reviewed_by_id=reviewed_by_id,
            updated_at=updated_at,
        )
        self._storage.cfs_submissions.pop(submission_id, None)

    @staticmethod
    def read_label_ids(submission_id: int) -> list[int]:
        return list(
            CfsSubmissionLabel.objects.filter(cfs_submission_id=submission_id)
            .order_by("event_cfs_label_id")
            .values_list("event_cfs_label_id", flat=True)
        )

    @staticmethod
    def set_labels(submission_id: int, label_ids: Iterable[int]) -> None:
        wanted = set(label_ids)
        labels = CfsSubmissionLabel.objects.filter(cfs_submission_id=submission_id)
        labels.exclude(event_cfs_label_id__in=wanted).delete()
        current = set(labels.values_list("event_cfs_label_id", flat=True))
        CfsSubmissionLabel.objects.bulk_create(
            CfsSubmissionLabel(cfs_submission_id=submission_id, event_cfs_label_id=pk)
            for pk in wanted - current
        )

    @staticmethod
    def read_ratings(submission_id: int) -> list[CfsSubmissionRatingDTO]:
        return [
            CfsSubmissionRatingDTO.model_validate(rating)
            for rating in CfsSubmissionRating.objects.filter(
                cfs_submission_id=submission_id
            ).order_by("reviewer_id")
        ]

    @staticmethod
    def upsert_rating(
        submission_id: int, reviewer_id: int, stars: int, comments: str
    ) -> None:
        CfsSubmissionRating.objects.update_or_create(
            cfs_submission_id=submission_id,
            reviewer_id=reviewer_id,
            defaults={
                "stars": stars,
                "comments": comments,
                "updated_at": timezone.now(),
            },
        )

    @staticmethod
    def delete_rating(submission_id: int, reviewer_id: int) -> None:
        CfsSubmissionRating.objects.filter(
            cfs_submission_id=submission_id, reviewer_id=reviewer_id
        ).delete()

    @staticmethod
    def list_by_event(event_id: int) -> list[CfsSubmissionListItemDTO]:
        """List an event's submissions, most recently reviewed first.

        Withdrawn submissions are left out.

        Returns:
            Submissions with their labels and ratings.
        """
        submissions = (
            CfsSubmission.objects.filter(event_id=event_id)
            .exclude(status=CfsSubmissionStatus.WITHDRAWN)
            .select_related("session_proposal__user")
            .prefetch_related("labels", "ratings")
            .annotate(linked_session_id=F("linked_session__id"))
            .order_by(F("updated_at").desc(nulls_last=True), "-created_at", "id")
        )
        return [
            CfsSubmissionListItemDTO(
                action_required_message=submission.action_required_message,
                created_at=submission.created_at,
                label_ids=sorted(label.pk for label in submission.labels.all()),
                linked_session_id=submission.linked_session_id,
                pk=submission.pk,
                ratings=[
                    CfsSubmissionRatingDTO.model_validate(rating)
                    for rating in submission.ratings.all()
                ],
                reviewed_by_id=submission.reviewed_by_id,
                speaker_name=submission.session_proposal.user.get_full_name(),
                status=submission.status,
                title=submission.session_proposal.title,
                updated_at=submission.updated_at,
            )
            for submission in submissions
        ]
