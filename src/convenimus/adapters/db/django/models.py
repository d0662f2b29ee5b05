from __future__ import annotations

from typing import ClassVar

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, UserManager
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from convenimus.pacts import MAX_CFS_LABEL_NAME_LENGTH


class Kind(models.TextChoices):
    HYBRID = "hybrid", _("Hybrid")
    IN_PERSON = "in-person", _("In person")
    VIRTUAL = "virtual", _("Virtual")


class CfsSubmissionStatus(models.TextChoices):
    APPROVED = "approved", _("Approved")
    INFORMATION_REQUESTED = "information-requested", _("Information requested")
    NOT_REVIEWED = "not-reviewed", _("Not reviewed")
    REJECTED = "rejected", _("Rejected")
    WITHDRAWN = "withdrawn", _("Withdrawn")


class Community(models.Model):
    name = models.CharField(max_length=255, unique=True)
    display_name = models.CharField(max_length=255)

    class Meta:
        db_table = "community"
        verbose_name_plural = "communities"

    def __str__(self) -> str:
        return self.display_name


class User(AbstractBaseUser, PermissionsMixin):
    EMAIL_FIELD = "email"
    USERNAME_FIELD = "username"
    REQUIRED_FIELDS: ClassVar = ["email"]

    community = models.ForeignKey(
        Community,
        on_delete=models.CASCADE,
        blank=True,
        null=True,
        related_name="users",
    )
    date_joined = models.DateTimeField(_("date joined"), default=timezone.now)
    email = models.EmailField(_("email address"), blank=True)
    is_active = models.BooleanField(_("active"), default=True)
    is_staff = models.BooleanField(_("staff status"), default=False)
    name = models.CharField(_("User name"), max_length=255, blank=True)
    username = models.CharField(
        _("username"),
        max_length=150,
        unique=True,
        error_messages={"unique": _("A user with that username already exists.")},
    )

    objects = UserManager()

    class Meta:
        db_table = "user"
        verbose_name = _("user")
        verbose_name_plural = _("users")

    def get_full_name(self) -> str:
        return self.name or self.username

    def get_short_name(self) -> str:
        return self.get_full_name().split(" ")[0]


class Group(models.Model):
    community = models.ForeignKey(
        Community, on_delete=models.CASCADE, related_name="groups"
    )
    name = models.CharField(max_length=255)
    slug = models.SlugField()
    active = models.BooleanField(default=True)
    team_members = models.ManyToManyField(
        settings.AUTH_USER_MODEL, blank=True, related_name="team_groups"
    )

    class Meta:
        db_table = "group"
        constraints = (
            models.UniqueConstraint(
                fields=("community", "slug"), name="group_has_unique_slug"
            ),
        )

    def __str__(self) -> str:
        return self.name


class GroupSponsor(models.Model):
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="sponsors")
    name = models.CharField(max_length=255)
    logo_url = models.URLField(blank=True, default="")

    class Meta:
        db_table = "group_sponsor"

    def __str__(self) -> str:
        return self.name


class Event(models.Model):
    # Owner
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="events")
    # ID
    name = models.CharField(max_length=255)
    slug = models.SlugField()
    description = models.TextField(default="", blank=True)
    kind = models.CharField(max_length=20, choices=Kind)
    capacity = models.PositiveIntegerField(blank=True, null=True)
    # Time - start and end, shown in the event timezone
    timezone = models.CharField(max_length=64, default="UTC")
    starts_at = models.DateTimeField(blank=True, null=True)
    ends_at = models.DateTimeField(blank=True, null=True)
    # Lifecycle
    published = models.BooleanField(default=False)
    canceled = models.BooleanField(default=False)
    deleted = models.BooleanField(default=False)
    # Virtual meeting, null meeting_in_sync means no meeting was ever requested
    meeting_requested = models.BooleanField(blank=True, null=True)
    meeting_in_sync = models.BooleanField(blank=True, null=True)
    meeting_provider_id = models.CharField(max_length=32, blank=True, null=True)
    meeting_hosts = models.JSONField(blank=True, null=True)
    # Reminders
    reminder_evaluated_for_starts_at = models.DateTimeField(blank=True, null=True)

    hosts = models.ManyToManyField(
        settings.AUTH_USER_MODEL, through="EventHost", related_name="hosted_events"
    )
    speakers = models.ManyToManyField(
        settings.AUTH_USER_MODEL, through="EventSpeaker", related_name="speaking_events"
    )
    sponsors = models.ManyToManyField(
        GroupSponsor, through="EventSponsor", related_name="events"
    )
    attendees = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="EventAttendee",
        related_name="attended_events",
    )

    class Meta:
        db_table = "event"
        constraints = (
            models.UniqueConstraint(
                fields=("group", "slug"), name="event_has_unique_slug_and_group"
            ),
            models.CheckConstraint(
                condition=Q(ends_at__isnull=True)
                | Q(starts_at__isnull=False, ends_at__gte=F("starts_at")),
                name="event_ends_after_starts",
            ),
        )

    def __str__(self) -> str:
        return self.name


class EventHost(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)

    class Meta:
        db_table = "event_host"
        constraints = (
            models.UniqueConstraint(fields=("event", "user"), name="event_host_unique"),
        )


class EventSpeaker(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    featured = models.BooleanField(default=False)

    class Meta:
        db_table = "event_speaker"
        constraints = (
            models.UniqueConstraint(
                fields=("event", "user"), name="event_speaker_unique"
            ),
        )


class EventSponsor(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE)
    group_sponsor = models.ForeignKey(GroupSponsor, on_delete=models.CASCADE)
    level = models.CharField(max_length=64)

    class Meta:
        db_table = "event_sponsor"
        constraints = (
            models.UniqueConstraint(
                fields=("event", "group_sponsor"), name="event_sponsor_unique"
            ),
        )


class EventAttendee(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    checked_in = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "event_attendee"
        constraints = (
            models.UniqueConstraint(
                fields=("event", "user"), name="event_attendee_unique"
            ),
        )


class EventCfsLabel(models.Model):
    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="cfs_labels"
    )
    name = models.CharField(max_length=MAX_CFS_LABEL_NAME_LENGTH)
    color = models.CharField(max_length=32)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "event_cfs_label"
        constraints = (
            models.UniqueConstraint(
                fields=("event", "name"), name="event_cfs_label_unique_name"
            ),
            models.CheckConstraint(
                condition=~Q(name=""), name="event_cfs_label_name_not_empty"
            ),
        )

    def __str__(self) -> str:
        return self.name


class SessionProposal(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="session_proposals",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(default="", blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "session_proposal"

    def __str__(self) -> str:
        return self.title


class CfsSubmission(models.Model):
    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="cfs_submissions"
    )
    session_proposal = models.ForeignKey(
        SessionProposal, on_delete=models.CASCADE, related_name="cfs_submissions"
    )
    status = models.CharField(
        max_length=32,
        choices=CfsSubmissionStatus,
        default=CfsSubmissionStatus.NOT_REVIEWED,
    )
    action_required_message = models.TextField(blank=True, null=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="reviewed_cfs_submissions",
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(blank=True, null=True)
    labels = models.ManyToManyField(
        EventCfsLabel, through="CfsSubmissionLabel", related_name="submissions"
    )

    class Meta:
        db_table = "cfs_submission"
        constraints = (
            models.UniqueConstraint(
                fields=("event", "session_proposal"),
                name="cfs_submission_unique_proposal_per_event",
            ),
            models.CheckConstraint(
                condition=~Q(action_required_message=""),
                name="cfs_submission_message_not_empty",
            ),
        )


class CfsSubmissionLabel(models.Model):
    cfs_submission = models.ForeignKey(CfsSubmission, on_delete=models.CASCADE)
    event_cfs_label = models.ForeignKey(EventCfsLabel, on_delete=models.CASCADE)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "cfs_submission_label"
        constraints = (
            models.UniqueConstraint(
                fields=("cfs_submission", "event_cfs_label"),
                name="cfs_submission_label_unique",
            ),
        )


class CfsSubmissionRating(models.Model):
    cfs_submission = models.ForeignKey(
        CfsSubmission, on_delete=models.CASCADE, related_name="ratings"
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="cfs_ratings"
    )
    stars = models.PositiveSmallIntegerField()
    comments = models.TextField(default="", blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = "cfs_submission_rating"
        constraints = (
            models.UniqueConstraint(
                fields=("cfs_submission", "reviewer"),
                name="cfs_submission_rating_one_per_reviewer",
            ),
            models.CheckConstraint(
                condition=Q(stars__gte=1, stars__lte=5),
                name="cfs_submission_rating_stars_range",
            ),
        )


class Session(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="sessions")
    name = models.CharField(max_length=255)
    description = models.TextField(default="", blank=True)
    kind = models.CharField(max_length=20, choices=Kind)
    location = models.CharField(max_length=255, default="", blank=True)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField(blank=True, null=True)
    meeting_requested = models.BooleanField(blank=True, null=True)
    meeting_in_sync = models.BooleanField(blank=True, null=True)
    meeting_provider_id = models.CharField(max_length=32, blank=True, null=True)
    meeting_requires_password = models.BooleanField(blank=True, null=True)
    meeting_hosts = models.JSONField(blank=True, null=True)
    # Set when promoted from an approved CFS submission
    cfs_submission = models.OneToOneField(
        CfsSubmission,
        on_delete=models.PROTECT,
        blank=True,
        null=True,
        related_name="linked_session",
    )

    speakers = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="SessionSpeaker",
        related_name="speaking_sessions",
    )

    class Meta:
        db_table = "session"
        constraints = (
            models.CheckConstraint(
                condition=Q(ends_at__isnull=True) | Q(ends_at__gte=F("starts_at")),
                name="session_ends_after_starts",
            ),
        )

    def __str__(self) -> str:
        return self.name


class SessionSpeaker(models.Model):
    session = models.ForeignKey(Session, on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    featured = models.BooleanField(default=False)

    class Meta:
        db_table = "session_speaker"
        constraints = (
            models.UniqueConstraint(
                fields=("session", "user"), name="session_speaker_unique"
            ),
        )


class Meeting(models.Model):
    """Meeting provisioned with an external provider.

    Survives the deletion of its event or session for later cleanup.
    """

    event = models.OneToOneField(
        Event,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="meeting",
    )
    session = models.OneToOneField(
        Session,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="meeting",
    )
    meeting_provider_id = models.CharField(max_length=32)
    provider_meeting_id = models.CharField(max_length=255)
    join_url = models.URLField()
    password = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = "meeting"
        constraints = (
            models.UniqueConstraint(
                fields=("meeting_provider_id", "provider_meeting_id"),
                name="meeting_unique_provider_meeting",
            ),
        )
