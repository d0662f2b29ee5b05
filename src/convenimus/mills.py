from __future__ import annotations

import logging
from collections import Counter
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from convenimus.pacts import (
    CFS_SUBMISSION_STATUS_NAMES,
    MAX_CFS_LABEL_NAME_LENGTH,
    CfsLabelData,
    CfsSubmissionDTO,
    CfsSubmissionListFilters,
    CfsSubmissionListItemDTO,
    CfsSubmissionListResult,
    CfsSubmissionStatus,
    CfsSubmissionStatusDTO,
    CfsSubmissionSummaryDTO,
    CfsSubmissionUpdateData,
    EventData,
    EventDTO,
    EventMeetingSnapshot,
    EventMeetingState,
    EventUpdateData,
    HostRef,
    InvalidTransitionError,
    MeetingRequest,
    NotFoundError,
    SessionData,
    SessionDTO,
    SessionKind,
    SessionMeetingSnapshot,
    SessionMeetingState,
    SessionUpdateData,
    SpeakerRef,
    UnitOfWorkProtocol,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_RATING_STARS = 5
DEFAULT_REMINDER_LOOKAHEAD = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


# Time helpers


def get_zone(timezone: str) -> ZoneInfo:
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exception:
        raise ValidationError(f"invalid timezone: {timezone}") from exception


def resolve_local_time(value: datetime | None, timezone: str) -> datetime | None:
    """Attach ``timezone`` to a naive local timestamp.

    Aware values are returned untouched, so callers may pass either form.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=get_zone(timezone))


def to_epoch(value: datetime | None) -> int | None:
    if value is None:
        return None
    return int(value.timestamp())


def _same_instant(before: int | None, after: datetime | None, timezone: str) -> bool:
    return before == to_epoch(resolve_local_time(after, timezone))


# Meeting sync


def _host_ids(hosts: Iterable[HostRef | int]) -> frozenset[int]:
    return frozenset(
        host.user_id if isinstance(host, HostRef) else host for host in hosts
    )


def _speaker_keys(speakers: Iterable[SpeakerRef]) -> frozenset[tuple[int, bool]]:
    return frozenset((speaker.user_id, speaker.featured) for speaker in speakers)


def _meeting_hosts(meeting_hosts: list[str] | None) -> frozenset[str]:
    return frozenset(meeting_hosts or ())


def is_event_meeting_in_sync(
    before: EventMeetingSnapshot, after: EventMeetingState
) -> bool:
    """Check whether the meeting provisioned for an event still matches it.

    A missing ``meeting_requested`` on the new side counts as ``False``.

    Returns:
        True when no provisioning work is needed.
    """
    before_requested = MeetingRequest.from_flag(before.meeting_requested)
    after_requested = MeetingRequest.from_flag(after.meeting_requested)

    if not before_requested.is_requested and not after_requested.is_requested:
        return True
    if before_requested.is_requested != after_requested.is_requested:
        return False

    return (
        before.name == after.name
        and before.kind == after.kind
        and before.timezone == after.timezone
        and _same_instant(before.starts_at, after.starts_at, after.timezone)
        and _same_instant(before.ends_at, after.ends_at, after.timezone)
        and before.meeting_provider_id == after.meeting_provider_id
        and _meeting_hosts(before.meeting_hosts) == _meeting_hosts(after.meeting_hosts)
        and _host_ids(before.hosts) == _host_ids(after.hosts)
        and _speaker_keys(before.speakers) == _speaker_keys(after.speakers)
    )


def is_session_meeting_in_sync(
    before: SessionMeetingSnapshot,
    after: SessionMeetingState,
    before_timezone: str,
    after_timezone: str,
) -> bool:
    """Check whether the meeting provisioned for a session still matches it.

    Sessions take their timezone from the parent event, hence the two
    extra arguments.

    Returns:
        True when no provisioning work is needed.
    """
    before_requested = MeetingRequest.from_flag(before.meeting_requested)
    after_requested = MeetingRequest.from_flag(after.meeting_requested)

    if not before_requested.is_requested and not after_requested.is_requested:
        return True
    if before_requested.is_requested != after_requested.is_requested:
        return False

    # Meetings do not apply to in-person sessions
    if (before.kind == SessionKind.IN_PERSON) != (after.kind == SessionKind.IN_PERSON):
        return False

    return (
        before.name == after.name
        and before.kind == after.kind
        and before_timezone == after_timezone
        and _same_instant(before.starts_at, after.starts_at, after_timezone)
        and _same_instant(before.ends_at, after.ends_at, after_timezone)
        and before.meeting_provider_id == after.meeting_provider_id
        and bool(before.meeting_requires_password)
        == bool(after.meeting_requires_password)
        and _meeting_hosts(before.meeting_hosts) == _meeting_hosts(after.meeting_hosts)
    )


def resolve_meeting_in_sync(
    *,
    stored: bool | None,
    before_requested: bool | None,
    after_requested: bool | None,
    in_sync: bool,
) -> bool | None:
    """Compute the value to store in ``meeting_in_sync``.

    A stored ``False`` marks pending provisioning work and is kept unless the
    new payload explicitly turns the meeting off. ``None`` means no meeting.

    Returns:
        The new tri-state flag.
    """
    if stored is False and after_requested is not False:
        return False
    if (
        not MeetingRequest.from_flag(before_requested).is_requested
        and not MeetingRequest.from_flag(after_requested).is_requested
    ):
        return None
    return in_sync


def build_event_snapshot(
    event: EventDTO, host_ids: Iterable[int], speakers: Iterable[SpeakerRef]
) -> EventMeetingSnapshot:
    return EventMeetingSnapshot(
        ends_at=to_epoch(event.ends_at),
        hosts=list(host_ids),
        kind=event.kind,
        meeting_hosts=event.meeting_hosts,
        meeting_provider_id=event.meeting_provider_id,
        meeting_requested=event.meeting_requested,
        name=event.name,
        speakers=list(speakers),
        starts_at=to_epoch(event.starts_at),
        timezone=event.timezone,
    )


def build_session_snapshot(session: SessionDTO) -> SessionMeetingSnapshot:
    return SessionMeetingSnapshot(
        ends_at=to_epoch(session.ends_at),
        kind=session.kind,
        meeting_hosts=session.meeting_hosts,
        meeting_provider_id=session.meeting_provider_id,
        meeting_requested=session.meeting_requested,
        meeting_requires_password=session.meeting_requires_password,
        name=session.name,
        starts_at=to_epoch(session.starts_at),
    )


# Temporal rules


class EventPhase(StrEnum):
    UPCOMING = "upcoming"
    LIVE = "live"
    PAST = "past"


def get_phase(
    starts_at: datetime | None, ends_at: datetime | None, now: datetime
) -> EventPhase:
    if starts_at is None or starts_at > now:
        return EventPhase.UPCOMING
    if ends_at is not None and ends_at > now:
        return EventPhase.LIVE
    return EventPhase.PAST


def validate_schedule(  # noqa: C901, PLR0913
    *,
    subject: str,
    phase: EventPhase,
    current_starts_at: datetime | None,
    starts_at: datetime | None,
    ends_at: datetime | None,
    now: datetime,
) -> None:
    """Validate new (absolute) start and end times of an event or session.

    Raises:
        ValidationError: when the times break an ordering or phase rule.
    """
    if ends_at is not None and starts_at is None:
        raise ValidationError(f"{subject} ends_at requires starts_at")
    if starts_at is not None and ends_at is not None and ends_at < starts_at:
        raise ValidationError(f"{subject} ends_at cannot be before starts_at")

    match phase:
        case EventPhase.UPCOMING:
            if starts_at is not None and starts_at < now:
                raise ValidationError(f"{subject} starts_at cannot be in the past")
            if ends_at is not None and ends_at < now:
                raise ValidationError(f"{subject} ends_at cannot be in the past")
        case EventPhase.LIVE:
            if starts_at is None:
                raise ValidationError(f"{subject} starts_at is required once started")
            if current_starts_at is not None and starts_at < current_starts_at:
                raise ValidationError(
                    f"{subject} starts_at cannot be moved earlier once started"
                )
        case EventPhase.PAST:
            if starts_at is not None and starts_at > now:
                raise ValidationError(f"{subject} starts_at cannot be in the future")
            if ends_at is not None and ends_at > now:
                raise ValidationError(f"{subject} ends_at cannot be in the future")


def validate_within_bounds(
    *,
    name: str,
    starts_at: datetime,
    ends_at: datetime | None,
    event_starts_at: datetime | None,
    event_ends_at: datetime | None,
) -> None:
    last = ends_at or starts_at
    if (event_starts_at is not None and starts_at < event_starts_at) or (
        event_ends_at is not None and last > event_ends_at
    ):
        raise ValidationError(f"session {name} must fall within event bounds")


def validate_capacity(
    *,
    capacity: int | None,
    attendees_count: int,
    meeting_requested: bool | None,
    meeting_provider_id: str | None,
    cfg_max_participants: dict[str, int] | None,
) -> None:
    if capacity is None:
        return
    if capacity < 0:
        raise ValidationError("event capacity cannot be negative")

    if meeting_requested and cfg_max_participants and meeting_provider_id:
        max_participants = cfg_max_participants.get(meeting_provider_id)
        if max_participants is not None and capacity > max_participants:
            raise ValidationError(
                f"event capacity ({capacity}) exceeds maximum participants "
                f"allowed ({max_participants})"
            )

    if capacity < attendees_count:
        raise ValidationError(
            f"event capacity ({capacity}) cannot be lower than the number of "
            f"registered attendees ({attendees_count})"
        )


def validate_cfs_labels(
    labels: Iterable[CfsLabelData], existing_ids: set[int]
) -> list[CfsLabelData]:
    cleaned: list[CfsLabelData] = []
    for label in labels:
        name = label["name"].strip()
        if not name:
            raise ValidationError("event CFS label name cannot be empty")
        if len(name) > MAX_CFS_LABEL_NAME_LENGTH:
            raise ValidationError(
                f"event CFS label name cannot exceed {MAX_CFS_LABEL_NAME_LENGTH} "
                "characters"
            )
        if (label_id := label.get("event_cfs_label_id")) is not None and (
            label_id not in existing_ids
        ):
            raise ValidationError("invalid event CFS labels")
        cleaned.append({**label, "name": name})

    counts = Counter(label["name"] for label in cleaned)
    duplicates = [name for name, count in counts.items() if count > 1]
    if duplicates:
        raise ValidationError(
            f"duplicate event CFS label names: {', '.join(duplicates)}"
        )

    return cleaned


# CFS review


def list_cfs_submission_statuses_for_review() -> list[CfsSubmissionStatusDTO]:
    return [
        CfsSubmissionStatusDTO(status=status, display_name=name)
        for status, name in sorted(CFS_SUBMISSION_STATUS_NAMES.items())
        if status != CfsSubmissionStatus.WITHDRAWN
    ]


def parse_review_status(value: str) -> CfsSubmissionStatus:
    try:
        status = CfsSubmissionStatus(value)
    except ValueError as exception:
        raise InvalidTransitionError("invalid submission status") from exception

    if status == CfsSubmissionStatus.WITHDRAWN:
        raise InvalidTransitionError("invalid submission status")

    return status


def parse_rating_stars(value: object) -> int:
    if (
        isinstance(value, bool)
        or not isinstance(value, int)
        or not 0 <= value <= MAX_RATING_STARS
    ):
        raise ValidationError("invalid rating stars")
    return value


def _normalize_message(message: str | None) -> str | None:
    if message is None:
        return None
    return message.strip() or None


def summarize_submission(
    item: CfsSubmissionListItemDTO, reviewer_id: int | None = None
) -> CfsSubmissionSummaryDTO:
    stars = [rating.stars for rating in item.ratings]
    my_rating = next(
        (rating for rating in item.ratings if rating.reviewer_id == reviewer_id), None
    )
    return CfsSubmissionSummaryDTO(
        item=item,
        my_rating=my_rating,
        ratings_average=round(sum(stars) / len(stars), 2) if stars else None,
        ratings_count=len(stars),
    )


def _created_key(summary: CfsSubmissionSummaryDTO) -> tuple[datetime, int]:
    return summary.item.created_at, summary.item.pk


class CfsSubmissionReviewService:
    """Reviewer-facing operations on call-for-speakers submissions."""

    def __init__(
        self, uow: UnitOfWorkProtocol, clock: Callable[[], datetime] = utc_now
    ) -> None:
        self._uow = uow
        self._clock = clock

    def update_submission(
        self,
        reviewer_id: int,
        event_id: int,
        submission_id: int,
        payload: CfsSubmissionUpdateData,
    ) -> bool:
        """Apply a review decision to a submission.

        Status and message travel together: when neither key is sent both are
        kept, otherwise a missing message clears the stored one. Labels are
        replaced only when ``label_ids`` is sent, and the reviewer's rating only
        when ``rating_stars`` is sent (``0`` clears it).

        Returns:
            True if the status or the action-required message changed, which
            is the signal to notify the speaker.

        Raises:
            NotFoundError: if the submission is missing, foreign or withdrawn.
            InvalidTransitionError: on an illegal target status.
            ValidationError: on bad rating stars or foreign labels.
        """
        with self._uow.atomic():
            submission = self._uow.cfs_submissions.read_for_review(
                event_id, submission_id
            )
            status, message = self._resolve_decision(submission, payload)
            label_ids = self._resolve_labels(event_id, payload)
            stars = (
                parse_rating_stars(payload["rating_stars"])
                if "rating_stars" in payload
                else None
            )

            self._uow.cfs_submissions.update_review(
                submission_id,
                status=status,
                action_required_message=message,
                reviewed_by_id=reviewer_id,
                updated_at=self._clock(),
            )
            if label_ids is not None:
                self._uow.cfs_submissions.set_labels(submission_id, label_ids)
            if stars is not None:
                self._apply_rating(
                    submission_id, reviewer_id, stars, payload.get("rating_comment")
                )

        changed = (
            status != submission.status
            or message != submission.action_required_message
        )
        logger.info(
            "Submission %s reviewed by user %s (status=%s, notify=%s)",
            submission_id,
            reviewer_id,
            status,
            changed,
        )
        return changed

    def list_submissions(
        self,
        event_id: int,
        filters: CfsSubmissionListFilters | None = None,
        reviewer_id: int | None = None,
    ) -> CfsSubmissionListResult:
        filters = filters or {}
        items = self._uow.cfs_submissions.list_by_event(event_id)

        # Counts cover every status, before the status filter applies
        status_counts: dict[str, int] = {
            status.value: 0
            for status in CfsSubmissionStatus
            if status != CfsSubmissionStatus.WITHDRAWN
        }
        for item in items:
            status_counts[item.status] += 1

        filtered = items
        if statuses := filters.get("statuses"):
            status_set = set(statuses)
            filtered = [item for item in filtered if item.status in status_set]
        if label_ids := filters.get("label_ids"):
            wanted = set(label_ids)
            filtered = [item for item in filtered if wanted & set(item.label_ids)]

        summaries = [summarize_submission(item, reviewer_id) for item in filtered]
        match filters.get("sort"):
            case "created-asc":
                summaries.sort(key=_created_key)
            case "created-desc":
                summaries.sort(key=_created_key, reverse=True)
            case "stars-desc":
                # Unrated submissions go last
                summaries.sort(
                    key=lambda summary: (
                        summary.ratings_average is None,
                        -(summary.ratings_average or 0),
                        summary.item.pk,
                    )
                )

        page = max(1, filters.get("page", 1))
        page_size = filters.get("page_size", DEFAULT_PAGE_SIZE)
        start = (page - 1) * page_size

        return CfsSubmissionListResult(
            submissions=summaries[start : start + page_size],
            status_counts=status_counts,
            total_count=len(items),
            filtered_count=len(filtered),
        )

    @staticmethod
    def _resolve_decision(
        submission: CfsSubmissionDTO, payload: CfsSubmissionUpdateData
    ) -> tuple[CfsSubmissionStatus, str | None]:
        if "status_id" not in payload and "action_required_message" not in payload:
            return submission.status, submission.action_required_message

        status = submission.status
        if "status_id" in payload:
            status = parse_review_status(payload["status_id"])
        if (
            submission.linked_session_id is not None
            and status != CfsSubmissionStatus.APPROVED
        ):
            raise InvalidTransitionError("linked submissions must remain approved")

        return status, _normalize_message(payload.get("action_required_message"))

    def _resolve_labels(
        self, event_id: int, payload: CfsSubmissionUpdateData
    ) -> set[int] | None:
        if "label_ids" not in payload:
            return None

        label_ids = set(payload["label_ids"])
        event_label_ids = {
            label.pk for label in self._uow.cfs_labels.read_list(event_id)
        }
        if not label_ids <= event_label_ids:
            raise ValidationError("invalid event CFS labels")

        return label_ids

    def _apply_rating(
        self, submission_id: int, reviewer_id: int, stars: int, comment: str | None
    ) -> None:
        if stars == 0:
            self._uow.cfs_submissions.delete_rating(submission_id, reviewer_id)
            return

        self._uow.cfs_submissions.upsert_rating(
            submission_id, reviewer_id, stars, (comment or "").strip()
        )


# Event updates


class EventUpdateService:
    """Full-replace updates of an event and everything nested under it."""

    def __init__(
        self,
        uow: UnitOfWorkProtocol,
        clock: Callable[[], datetime] = utc_now,
        reminder_lookahead: timedelta = DEFAULT_REMINDER_LOOKAHEAD,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._reminder_lookahead = reminder_lookahead

    def update_event(
        self,
        group_id: int,
        event_id: int,
        payload: EventUpdateData,
        cfg_max_participants: dict[str, int] | None = None,
    ) -> None:
        """Replace an event's data, validating everything before writing.

        Raises:
            NotFoundError: if the event is missing, canceled or deleted, or a
                session id does not belong to it.
            ValidationError: if a temporal, capacity, membership or label rule
                is broken.
        """
        now = self._clock()
        timezone = payload["timezone"]
        get_zone(timezone)

        with self._uow.atomic():
            event = self._uow.events.read_active(group_id, event_id)
            group = self._uow.groups.read(group_id)

            starts_at = resolve_local_time(payload.get("starts_at"), timezone)
            ends_at = resolve_local_time(payload.get("ends_at"), timezone)
            validate_schedule(
                subject="event",
                phase=get_phase(event.starts_at, event.ends_at, now),
                current_starts_at=event.starts_at,
                starts_at=starts_at,
                ends_at=ends_at,
                now=now,
            )
            validate_capacity(
                capacity=payload.get("capacity"),
                attendees_count=self._uow.events.count_attendees(event_id),
                meeting_requested=payload.get("meeting_requested"),
                meeting_provider_id=payload.get("meeting_provider_id"),
                cfg_max_participants=cfg_max_participants,
            )
            self._validate_people(group.community_id, payload)
            self._validate_sponsors(group_id, payload)

            stored_sessions = {
                session.pk: session
                for session in self._uow.sessions.read_list(event_id)
            }
            sessions = self._prepare_sessions(
                event,
                payload,
                stored_sessions,
                event_starts_at=starts_at,
                event_ends_at=ends_at,
                now=now,
            )
            labels = self._prepare_labels(event_id, payload)

            event_data = self._build_event_data(
                event, payload, starts_at=starts_at, ends_at=ends_at, now=now
            )

            self._uow.events.update(event_id, event_data)
            self._uow.events.set_hosts(event_id, payload.get("hosts", []))
            self._uow.events.set_speakers(event_id, payload.get("speakers", []))
            self._uow.events.set_sponsors(event_id, payload.get("sponsors", []))
            self._write_sessions(event_id, sessions)
            if labels is not None:
                self._write_labels(event_id, *labels)

        if event_data.get("meeting_in_sync") is False:
            logger.info("Event %s meeting flagged out of sync", event_id)
        logger.info("Event %s updated in group %s", event_id, group_id)

    def _validate_people(self, community_id: int, payload: EventUpdateData) -> None:
        host_ids = payload.get("hosts", [])
        speaker_ids = [speaker["user_id"] for speaker in payload.get("speakers", [])]
        speaker_ids += [
            speaker["user_id"]
            for session in payload.get("sessions", [])
            for speaker in session.get("speakers", [])
        ]
        known = self._uow.groups.read_community_user_ids(
            community_id, {*host_ids, *speaker_ids}
        )
        for user_id in host_ids:
            if user_id not in known:
                raise ValidationError(f"host user {user_id} not found in community")
        for user_id in speaker_ids:
            if user_id not in known:
                raise ValidationError(f"speaker user {user_id} not found in community")

    def _validate_sponsors(self, group_id: int, payload: EventUpdateData) -> None:
        sponsor_ids = [
            sponsor["group_sponsor_id"] for sponsor in payload.get("sponsors", [])
        ]
        known = self._uow.groups.read_sponsor_ids(group_id, sponsor_ids)
        for sponsor_id in sponsor_ids:
            if sponsor_id not in known:
                raise ValidationError(f"sponsor {sponsor_id} not found in group")

    def _prepare_sessions(  # noqa: PLR0913
        self,
        event: EventDTO,
        payload: EventUpdateData,
        stored_sessions: dict[int, SessionDTO],
        *,
        event_starts_at: datetime | None,
        event_ends_at: datetime | None,
        now: datetime,
    ) -> list[tuple[int | None, SessionUpdateData, SessionData]]:
        timezone = payload["timezone"]
        event_phase = get_phase(event.starts_at, event.ends_at, now)
        prepared = []

        for session_payload in payload.get("sessions", []):
            stored = None
            if (session_id := session_payload.get("session_id")) is not None:
                if (stored := stored_sessions.get(session_id)) is None:
                    raise NotFoundError(
                        f"session {session_id} not found for event {event.pk}"
                    )

            name = session_payload["name"]
            starts_at = resolve_local_time(session_payload["starts_at"], timezone)
            ends_at = resolve_local_time(session_payload.get("ends_at"), timezone)
            if starts_at is None:
                raise ValidationError(f"session {name} starts_at is required")

            validate_schedule(
                subject=f"session {name}",
                phase=(
                    get_phase(stored.starts_at, stored.ends_at, now)
                    if stored
                    else event_phase
                ),
                current_starts_at=stored.starts_at if stored else None,
                starts_at=starts_at,
                ends_at=ends_at,
                now=now,
            )
            validate_within_bounds(
                name=name,
                starts_at=starts_at,
                ends_at=ends_at,
                event_starts_at=event_starts_at,
                event_ends_at=event_ends_at,
            )

            requested = session_payload.get("meeting_requested")
            if stored is None:
                in_sync = False if requested else None
            else:
                in_sync = resolve_meeting_in_sync(
                    stored=stored.meeting_in_sync,
                    before_requested=stored.meeting_requested,
                    after_requested=requested,
                    in_sync=is_session_meeting_in_sync(
                        build_session_snapshot(stored),
                        SessionMeetingState.model_validate(session_payload),
                        event.timezone,
                        timezone,
                    ),
                )

            session_data = SessionData(
                description=session_payload.get("description", ""),
                ends_at=ends_at,
                kind=session_payload["kind"],
                location=session_payload.get("location", ""),
                meeting_hosts=session_payload.get("meeting_hosts"),
                meeting_in_sync=in_sync,
                meeting_provider_id=session_payload.get("meeting_provider_id"),
                meeting_requested=requested,
                meeting_requires_password=session_payload.get(
                    "meeting_requires_password"
                ),
                name=name,
                starts_at=starts_at,
            )
            prepared.append((session_id, session_payload, session_data))

        return prepared

    def _prepare_labels(
        self, event_id: int, payload: EventUpdateData
    ) -> tuple[list[CfsLabelData], dict[int, str]] | None:
        """Validate the payload labels against the event's stored ones.

        Returns:
            The cleaned labels and the stored names by label id, or None
            when the payload leaves labels untouched.
        """
        if "cfs_labels" not in payload:
            return None

        stored_names = {
            label.pk: label.name for label in self._uow.cfs_labels.read_list(event_id)
        }
        return (
            validate_cfs_labels(payload["cfs_labels"], set(stored_names)),
            stored_names,
        )

    def _build_event_data(
        self,
        event: EventDTO,
        payload: EventUpdateData,
        *,
        starts_at: datetime | None,
        ends_at: datetime | None,
        now: datetime,
    ) -> EventData:
        before = build_event_snapshot(
            event,
            self._uow.events.read_host_ids(event.pk),
            [
                SpeakerRef.model_validate(speaker)
                for speaker in self._uow.events.read_speakers(event.pk)
            ],
        )
        after = EventMeetingState.model_validate(payload)

        event_data = EventData(
            capacity=payload.get("capacity"),
            description=payload.get("description", ""),
            ends_at=ends_at,
            kind=payload["kind"],
            meeting_hosts=payload.get("meeting_hosts"),
            meeting_in_sync=resolve_meeting_in_sync(
                stored=event.meeting_in_sync,
                before_requested=event.meeting_requested,
                after_requested=payload.get("meeting_requested"),
                in_sync=is_event_meeting_in_sync(before, after),
            ),
            meeting_provider_id=payload.get("meeting_provider_id"),
            meeting_requested=payload.get("meeting_requested"),
            name=payload["name"],
            starts_at=starts_at,
            timezone=payload["timezone"],
        )

        if (
            event.published
            and starts_at is not None
            and now < starts_at <= now + self._reminder_lookahead
            and event.reminder_evaluated_for_starts_at != starts_at
        ):
            event_data["reminder_evaluated_for_starts_at"] = starts_at

        return event_data

    def _write_sessions(
        self,
        event_id: int,
        sessions: list[tuple[int | None, SessionUpdateData, SessionData]],
    ) -> None:
        keep_ids = []
        for session_id, session_payload, session_data in sessions:
            if session_id is None:
                session_id = self._uow.sessions.create(event_id, session_data)
            else:
                self._uow.sessions.update(session_id, session_data)
            self._uow.sessions.set_speakers(
                session_id, session_payload.get("speakers", [])
            )
            keep_ids.append(session_id)

        if deleted := self._uow.sessions.delete_except(event_id, keep_ids):
            logger.info("Deleted %d sessions from event %s", deleted, event_id)

    def _write_labels(
        self,
        event_id: int,
        labels: list[CfsLabelData],
        stored_names: dict[int, str],
    ) -> None:
        """Prune, rename and create labels without tripping the unique name.

        Names are unique per event and checked row by row, so a kept label
        whose stored name is taken by another payload label (a swap, or a
        new label reusing it) first moves to a placeholder name.
        """
        kept = {
            label["event_cfs_label_id"]: label
            for label in labels
            if "event_cfs_label_id" in label
        }
        # Prune first so a new label may reuse the name of a removed one
        self._uow.cfs_labels.delete_except(event_id, list(kept))

        claimed = {
            label["name"]
            for label in labels
            if label.get("event_cfs_label_id") is None
            or label["name"] != stored_names[label["event_cfs_label_id"]]
        }
        for label_id, label in kept.items():
            stored_name = stored_names[label_id]
            if stored_name != label["name"] and stored_name in claimed:
                # Cleaned names never start with a space
                self._uow.cfs_labels.update(
                    label_id, {**label, "name": f" {label_id}"}
                )

        for label in labels:
            if (label_id := label.get("event_cfs_label_id")) is None:
                self._uow.cfs_labels.create(event_id, label)
            else:
                self._uow.cfs_labels.update(label_id, label)
