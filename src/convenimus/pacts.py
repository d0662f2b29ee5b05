from collections.abc import Iterable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import (
    Annotated,
    Literal,
    NotRequired,
    Protocol,
    Required,
    Self,
    TypedDict,
)

from pydantic import BaseModel, ConfigDict, Field, StrictInt

MAX_CFS_LABEL_NAME_LENGTH = 80


class ConvenimusError(Exception):
    """Base class for errors whose message can be shown to the acting user."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class NotFoundError(ConvenimusError):
    pass


class InvalidTransitionError(ConvenimusError):
    pass


class ValidationError(ConvenimusError):
    pass


class ConstraintViolationError(ConvenimusError):
    pass


class CfsSubmissionStatus(StrEnum):
    APPROVED = "approved"
    INFORMATION_REQUESTED = "information-requested"
    NOT_REVIEWED = "not-reviewed"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


CFS_SUBMISSION_STATUS_NAMES = {
    CfsSubmissionStatus.APPROVED: "Approved",
    CfsSubmissionStatus.INFORMATION_REQUESTED: "Information requested",
    CfsSubmissionStatus.NOT_REVIEWED: "Not reviewed",
    CfsSubmissionStatus.REJECTED: "Rejected",
    CfsSubmissionStatus.WITHDRAWN: "Withdrawn",
}


class EventKind(StrEnum):
    HYBRID = "hybrid"
    IN_PERSON = "in-person"
    VIRTUAL = "virtual"


class SessionKind(StrEnum):
    HYBRID = "hybrid"
    IN_PERSON = "in-person"
    VIRTUAL = "virtual"


class MeetingRequest(StrEnum):
    """Meeting flag as received, keeping "not sent" apart from "false"."""

    ABSENT = "absent"
    FALSE = "false"
    TRUE = "true"

    @classmethod
    def from_flag(cls, value: bool | None) -> Self:  # noqa: FBT001
        if value is None:
            return cls.ABSENT
        return cls.TRUE if value else cls.FALSE

    @property
    def is_requested(self) -> bool:
        return self is MeetingRequest.TRUE


# Meeting-sync inputs


class HostRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int


class SpeakerRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    featured: bool = False
    user_id: int


class EventMeetingSnapshot(BaseModel):
    """Stored event state, with times already resolved to epoch seconds."""

    ends_at: int | None = None
    hosts: list[HostRef | int] = []
    kind: EventKind
    meeting_hosts: list[str] | None = None
    meeting_provider_id: str | None = None
    meeting_requested: bool | None = None
    name: str
    speakers: list[SpeakerRef] = []
    starts_at: int | None = None
    timezone: str


class EventMeetingState(BaseModel):
    """Incoming event state, with naive local times in ``timezone``."""

    ends_at: datetime | None = None
    hosts: list[HostRef | int] = []
    kind: EventKind
    meeting_hosts: list[str] | None = None
    meeting_provider_id: str | None = None
    meeting_requested: bool | None = None
    name: str
    speakers: list[SpeakerRef] = []
    starts_at: datetime | None = None
    timezone: str


class SessionMeetingSnapshot(BaseModel):
    ends_at: int | None = None
    kind: SessionKind
    meeting_hosts: list[str] | None = None
    meeting_provider_id: str | None = None
    meeting_requested: bool | None = None
    meeting_requires_password: bool | None = None
    name: str
    starts_at: int | None = None


class SessionMeetingState(BaseModel):
    ends_at: datetime | None = None
    kind: SessionKind
    meeting_hosts: list[str] | None = None
    meeting_provider_id: str | None = None
    meeting_requested: bool | None = None
    meeting_requires_password: bool | None = None
    name: str
    starts_at: datetime | None = None


# DTOs


class GroupDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    community_id: int
    name: str
    pk: int
    slug: str


class EventDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    canceled: bool
    capacity: int | None
    deleted: bool
    description: str
    ends_at: datetime | None
    group_id: int
    kind: EventKind
    meeting_hosts: list[str] | None
    meeting_in_sync: bool | None
    meeting_provider_id: str | None
    meeting_requested: bool | None
    name: str
    pk: int
    published: bool
    reminder_evaluated_for_starts_at: datetime | None
    slug: str
    starts_at: datetime | None
    timezone: str


class SessionDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cfs_submission_id: int | None
    description: str
    ends_at: datetime | None
    event_id: int
    kind: SessionKind
    location: str
    meeting_hosts: list[str] | None
    meeting_in_sync: bool | None
    meeting_provider_id: str | None
    meeting_requested: bool | None
    meeting_requires_password: bool | None
    name: str
    pk: int
    starts_at: datetime


class CfsSubmissionDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    action_required_message: str | None
    created_at: datetime
    event_id: int
    linked_session_id: int | None = None
    pk: int
    reviewed_by_id: int | None
    session_proposal_id: int
    status: CfsSubmissionStatus
    updated_at: datetime | None


class CfsSubmissionRatingDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    comments: str
    reviewer_id: int
    stars: int


class EventCfsLabelDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    color: str
    event_id: int
    name: str
    pk: int


class CfsSubmissionListItemDTO(BaseModel):
    action_required_message: str | None
    created_at: datetime
    label_ids: list[int]
    linked_session_id: int | None
    pk: int
    ratings: list[CfsSubmissionRatingDTO]
    reviewed_by_id: int | None
    speaker_name: str
    status: CfsSubmissionStatus
    title: str
    updated_at: datetime | None


class CfsSubmissionSummaryDTO(BaseModel):
    item: CfsSubmissionListItemDTO
    my_rating: CfsSubmissionRatingDTO | None
    ratings_average: float | None
    ratings_count: int


class CfsSubmissionStatusDTO(BaseModel):
    display_name: str
    status: CfsSubmissionStatus


@dataclass
class CfsSubmissionListResult:
    submissions: list[CfsSubmissionSummaryDTO]
    status_counts: dict[str, int]
    total_count: int
    filtered_count: int


# Payloads


class CfsSubmissionUpdateData(TypedDict, total=False):
    action_required_message: str | None
    label_ids: list[int]
    rating_comment: str | None
    rating_stars: StrictInt
    status_id: str


class CfsSubmissionListFilters(TypedDict, total=False):
    label_ids: list[int]
    page: int
    page_size: Annotated[int, Field(ge=1)]
    sort: Literal["created-asc", "created-desc", "stars-desc"]
    statuses: list[str]


class SpeakerData(TypedDict):
    featured: bool
    user_id: int


class SponsorData(TypedDict):
    group_sponsor_id: int
    level: str


class CfsLabelData(TypedDict):
    color: str
    event_cfs_label_id: NotRequired[int]
    name: str


class SessionUpdateData(TypedDict, total=False):
    description: str
    ends_at: datetime | None
    kind: Required[SessionKind]
    location: str
    meeting_hosts: list[str] | None
    meeting_provider_id: str | None
    meeting_requested: bool | None
    meeting_requires_password: bool | None
    name: Required[str]
    session_id: int
    speakers: list[SpeakerData]
    starts_at: Required[datetime]


class EventUpdateData(TypedDict, total=False):
    capacity: int | None
    cfs_labels: list[CfsLabelData]
    description: str
    ends_at: datetime | None
    hosts: list[int]
    kind: Required[EventKind]
    meeting_hosts: list[str] | None
    meeting_provider_id: str | None
    meeting_requested: bool | None
    name: Required[str]
    sessions: list[SessionUpdateData]
    speakers: list[SpeakerData]
    sponsors: list[SponsorData]
    starts_at: datetime | None
    timezone: Required[str]


class EventData(TypedDict, total=False):
    capacity: int | None
    description: str
    ends_at: datetime | None
    kind: EventKind
    meeting_hosts: list[str] | None
    meeting_in_sync: bool | None
    meeting_provider_id: str | None
    meeting_requested: bool | None
    name: str
    reminder_evaluated_for_starts_at: datetime | None
    starts_at: datetime | None
    timezone: str


class SessionData(TypedDict, total=False):
    description: str
    ends_at: datetime | None
    kind: SessionKind
    location: str
    meeting_hosts: list[str] | None
    meeting_in_sync: bool | None
    meeting_provider_id: str | None
    meeting_requested: bool | None
    meeting_requires_password: bool | None
    name: str
    starts_at: datetime


# Repositories


class GroupRepositoryProtocol(Protocol):
    def read(self, group_id: int) -> GroupDTO: ...
    def is_team_member(self, group_id: int, user_id: int) -> bool: ...
    def read_community_user_ids(
        self, community_id: int, user_ids: Iterable[int]
    ) -> set[int]: ...
    def read_sponsor_ids(
        self, group_id: int, sponsor_ids: Iterable[int]
    ) -> set[int]: ...


class EventRepositoryProtocol(Protocol):
    def read_active(self, group_id: int, event_id: int) -> EventDTO: ...
    def belongs_to_group(self, event_id: int, group_id: int) -> bool: ...
    def read_host_ids(self, event_id: int) -> list[int]: ...
    def read_speakers(self, event_id: int) -> list[SpeakerData]: ...
    def count_attendees(self, event_id: int) -> int: ...
    def update(self, event_id: int, event_data: EventData) -> None: ...
    def set_hosts(self, event_id: int, user_ids: Iterable[int]) -> None: ...
    def set_speakers(self, event_id: int, speakers: Iterable[SpeakerData]) -> None: ...
    def set_sponsors(self, event_id: int, sponsors: Iterable[SponsorData]) -> None: ...


class SessionRepositoryProtocol(Protocol):
    def read_list(self, event_id: int) -> list[SessionDTO]: ...
    def create(self, event_id: int, session_data: SessionData) -> int: ...
    def update(self, session_id: int, session_data: SessionData) -> None: ...
    def set_speakers(
        self, session_id: int, speakers: Iterable[SpeakerData]
    ) -> None: ...
    def delete_except(self, event_id: int, keep_ids: Iterable[int]) -> int: ...


class CfsLabelRepositoryProtocol(Protocol):
    def read_list(self, event_id: int) -> list[EventCfsLabelDTO]: ...
    def create(self, event_id: int, label_data: CfsLabelData) -> int: ...
    def update(self, label_id: int, label_data: CfsLabelData) -> None: ...
    def delete_except(self, event_id: int, keep_ids: Iterable[int]) -> int: ...


class CfsSubmissionRepositoryProtocol(Protocol):
    def read_for_review(
        self, event_id: int, submission_id: int
    ) -> CfsSubmissionDTO: ...
    def update_review(  # noqa: PLR0913
        self,
        submission_id: int,
        *,
        status: CfsSubmissionStatus,
        action_required_message: str | None,
        reviewed_by_id: int,
        updated_at: datetime,
    ) -> None: ...
    def read_label_ids(self, submission_id: int) -> list[int]: ...
    def set_labels(self, submission_id: int, label_ids: Iterable[int]) -> None: ...
    def read_ratings(self, submission_id: int) -> list[CfsSubmissionRatingDTO]: ...
    def upsert_rating(
        self, submission_id: int, reviewer_id: int, stars: int, comments: str
    ) -> None: ...
    def delete_rating(self, submission_id: int, reviewer_id: int) -> None: ...
    def list_by_event(self, event_id: int) -> list[CfsSubmissionListItemDTO]: ...


class UnitOfWorkProtocol(Protocol):
    @staticmethod
    def atomic() -> AbstractContextManager[None]: ...
    @property
    def cfs_labels(self) -> CfsLabelRepositoryProtocol: ...
    @property
    def cfs_submissions(self) -> CfsSubmissionRepositoryProtocol: ...
    @property
    def events(self) -> EventRepositoryProtocol: ...
    @property
    def groups(self) -> GroupRepositoryProtocol: ...
    @property
    def sessions(self) -> SessionRepositoryProtocol: ...
