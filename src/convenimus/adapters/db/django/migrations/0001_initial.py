# Generated manually

import django.contrib.auth.models
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

KIND_CHOICES = [
    ("hybrid", "Hybrid"),
    ("in-person", "In person"),
    ("virtual", "Virtual"),
]


def _id() -> models.BigAutoField:
    return models.BigAutoField(
        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [("auth", "0012_alter_user_first_name_max_length")]

    operations = [
        migrations.CreateModel(
            name="Community",
            fields=[
                ("id", _id()),
                ("name", models.CharField(max_length=255, unique=True)),
                ("display_name", models.CharField(max_length=255)),
            ],
            options={"db_table": "community", "verbose_name_plural": "communities"},
        ),
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", _id()),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                (
                    "last_login",
                    models.DateTimeField(
                        blank=True, null=True, verbose_name="last login"
                    ),
                ),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text=(
                            "Designates that this user has all permissions without "
                            "explicitly assigning them."
                        ),
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "date_joined",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="date joined"
                    ),
                ),
                (
                    "email",
                    models.EmailField(
                        blank=True, max_length=254, verbose_name="email address"
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                (
                    "is_staff",
                    models.BooleanField(default=False, verbose_name="staff status"),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True, max_length=255, verbose_name="User name"
                    ),
                ),
                (
                    "username",
                    models.CharField(
                        error_messages={
                            "unique": "A user with that username already exists."
                        },
                        max_length=150,
                        unique=True,
                        verbose_name="username",
                    ),
                ),
                (
                    "community",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="users",
                        to="db_main.community",
                    ),
                ),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text=(
                            "The groups this user belongs to. A user will get all "
                            "permissions granted to each of their groups."
                        ),
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "db_table": "user",
                "verbose_name": "user",
                "verbose_name_plural": "users",
            },
            managers=[("objects", django.contrib.auth.models.UserManager())],
        ),
        migrations.CreateModel(
            name="Group",
            fields=[
                ("id", _id()),
                ("name", models.CharField(max_length=255)),
                ("slug", models.SlugField()),
                ("active", models.BooleanField(default=True)),
                (
                    "community",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="groups",
                        to="db_main.community",
                    ),
                ),
                (
                    "team_members",
                    models.ManyToManyField(
                        blank=True,
                        related_name="team_groups",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "group",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("community", "slug"), name="group_has_unique_slug"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="GroupSponsor",
            fields=[
                ("id", _id()),
                ("name", models.CharField(max_length=255)),
                ("logo_url", models.URLField(blank=True, default="")),
                (
                    "group",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sponsors",
                        to="db_main.group",
                    ),
                ),
            ],
            options={"db_table": "group_sponsor"},
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", _id()),
                ("name", models.CharField(max_length=255)),
                ("slug", models.SlugField()),
                ("description", models.TextField(blank=True, default="")),
                ("kind", models.CharField(choices=KIND_CHOICES, max_length=20)),
                ("capacity", models.PositiveIntegerField(blank=True, null=True)),
                ("timezone", models.CharField(default="UTC", max_length=64)),
                ("starts_at", models.DateTimeField(blank=True, null=True)),
                ("ends_at", models.DateTimeField(blank=True, null=True)),
                ("published", models.BooleanField(default=False)),
                ("canceled", models.BooleanField(default=False)),
                ("deleted", models.BooleanField(default=False)),
                ("meeting_requested", models.BooleanField(blank=True, null=True)),
                ("meeting_in_sync", models.BooleanField(blank=True, null=True)),
                (
                    "meeting_provider_id",
                    models.CharField(blank=True, max_length=32, null=True),
                ),
                ("meeting_hosts", models.JSONField(blank=True, null=True)),
                (
                    "reminder_evaluated_for_starts_at",
                    models.DateTimeField(blank=True, null=True),
                ),
                (
                    "group",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="db_main.group",
                    ),
                ),
            ],
            options={
                "db_table": "event",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("group", "slug"), name="event_has_unique_slug_and_group"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(ends_at__isnull=True)
                        | models.Q(
                            starts_at__isnull=False, ends_at__gte=models.F("starts_at")
                        ),
                        name="event_ends_after_starts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EventHost",
            fields=[
                ("id", _id()),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, to="db_main.event"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "event_host",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "user"), name="event_host_unique"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="EventSpeaker",
            fields=[
                ("id", _id()),
                ("featured", models.BooleanField(default=False)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, to="db_main.event"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "event_speaker",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "user"), name="event_speaker_unique"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="EventSponsor",
            fields=[
                ("id", _id()),
                ("level", models.CharField(max_length=64)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, to="db_main.event"
                    ),
                ),
                (
                    "group_sponsor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to="db_main.groupsponsor",
                    ),
                ),
            ],
            options={
                "db_table": "event_sponsor",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "group_sponsor"), name="event_sponsor_unique"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="EventAttendee",
            fields=[
                ("id", _id()),
                ("checked_in", models.BooleanField(default=False)),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, to="db_main.event"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "event_attendee",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "user"), name="event_attendee_unique"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="EventCfsLabel",
            fields=[
                ("id", _id()),
                ("name", models.CharField(max_length=80)),
                ("color", models.CharField(max_length=32)),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cfs_labels",
                        to="db_main.event",
                    ),
                ),
            ],
            options={
                "db_table": "event_cfs_label",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "name"), name="event_cfs_label_unique_name"
                    ),
                    models.CheckConstraint(
                        condition=~models.Q(name=""),
                        name="event_cfs_label_name_not_empty",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SessionProposal",
            fields=[
                ("id", _id()),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="session_proposals",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"db_table": "session_proposal"},
        ),
        migrations.CreateModel(
            name="CfsSubmission",
            fields=[
                ("id", _id()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("approved", "Approved"),
                            ("information-requested", "Information requested"),
                            ("not-reviewed", "Not reviewed"),
                            ("rejected", "Rejected"),
                            ("withdrawn", "Withdrawn"),
                        ],
                        default="not-reviewed",
                        max_length=32,
                    ),
                ),
                ("action_required_message", models.TextField(blank=True, null=True)),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("updated_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cfs_submissions",
                        to="db_main.event",
                    ),
                ),
                (
                    "reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviewed_cfs_submissions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "session_proposal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cfs_submissions",
                        to="db_main.sessionproposal",
                    ),
                ),
            ],
            options={
                "db_table": "cfs_submission",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "session_proposal"),
                        name="cfs_submission_unique_proposal_per_event",
                    ),
                    models.CheckConstraint(
                        condition=~models.Q(action_required_message=""),
                        name="cfs_submission_message_not_empty",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CfsSubmissionLabel",
            fields=[
                ("id", _id()),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "cfs_submission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to="db_main.cfssubmission",
                    ),
                ),
                (
                    "event_cfs_label",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to="db_main.eventcfslabel",
                    ),
                ),
            ],
            options={
                "db_table": "cfs_submission_label",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("cfs_submission", "event_cfs_label"),
                        name="cfs_submission_label_unique",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="CfsSubmissionRating",
            fields=[
                ("id", _id()),
                ("stars", models.PositiveSmallIntegerField()),
                ("comments", models.TextField(blank=True, default="")),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("updated_at", models.DateTimeField(blank=True, null=True)),
                (
                    "cfs_submission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ratings",
                        to="db_main.cfssubmission",
                    ),
                ),
                (
                    "reviewer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cfs_ratings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "cfs_submission_rating",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("cfs_submission", "reviewer"),
                        name="cfs_submission_rating_one_per_reviewer",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(stars__gte=1, stars__lte=5),
                        name="cfs_submission_rating_stars_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Session",
            fields=[
                ("id", _id()),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("kind", models.CharField(choices=KIND_CHOICES, max_length=20)),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("starts_at", models.DateTimeField()),
                ("ends_at", models.DateTimeField(blank=True, null=True)),
                ("meeting_requested", models.BooleanField(blank=True, null=True)),
                ("meeting_in_sync", models.BooleanField(blank=True, null=True)),
                (
                    "meeting_provider_id",
                    models.CharField(blank=True, max_length=32, null=True),
                ),
                (
                    "meeting_requires_password",
                    models.BooleanField(blank=True, null=True),
                ),
                ("meeting_hosts", models.JSONField(blank=True, null=True)),
                (
                    "cfs_submission",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="linked_session",
                        to="db_main.cfssubmission",
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sessions",
                        to="db_main.event",
                    ),
                ),
            ],
            options={
                "db_table": "session",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(ends_at__isnull=True)
                        | models.Q(ends_at__gte=models.F("starts_at")),
                        name="session_ends_after_starts",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="SessionSpeaker",
            fields=[
                ("id", _id()),
                ("featured", models.BooleanField(default=False)),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to="db_main.session",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "session_speaker",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("session", "user"), name="session_speaker_unique"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Meeting",
            fields=[
                ("id", _id()),
                ("meeting_provider_id", models.CharField(max_length=32)),
                ("provider_meeting_id", models.CharField(max_length=255)),
                ("join_url", models.URLField()),
                ("password", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("updated_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="meeting",
                        to="db_main.event",
                    ),
                ),
                (
                    "session",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="meeting",
                        to="db_main.session",
                    ),
                ),
            ],
            options={
                "db_table": "meeting",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("meeting_provider_id", "provider_meeting_id"),
                        name="meeting_unique_provider_meeting",
                    )
                ],
            },
        ),
        migrations.AddField(
            model_name="event",
            name="hosts",
            field=models.ManyToManyField(
                related_name="hosted_events",
                through="db_main.EventHost",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        migrations.AddField(
            model_name="event",
            name="speakers",
            field=models.ManyToManyField(
                related_name="speaking_events",
                through="db_main.EventSpeaker",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        migrations.AddField(
            model_name="event",
            name="sponsors",
            field=models.ManyToManyField(
                related_name="events",
                through="db_main.EventSponsor",
                to="db_main.groupsponsor",
            ),
        ),
        migrations.AddField(
            model_name="event",
            name="attendees",
            field=models.ManyToManyField(
                related_name="attended_events",
                through="db_main.EventAttendee",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        migrations.AddField(
            model_name="cfssubmission",
            name="labels",
            field=models.ManyToManyField(
                related_name="submissions",
                through="db_main.CfsSubmissionLabel",
                to="db_main.eventcfslabel",
            ),
        ),
        migrations.AddField(
            model_name="session",
            name="speakers",
            field=models.ManyToManyField(
                related_name="speaking_sessions",
                through="db_main.SessionSpeaker",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]
