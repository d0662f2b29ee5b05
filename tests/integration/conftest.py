from datetime import UTC, datetime, timedelta

import pytest
from factory import Faker, LazyAttribute, SubFactory
from factory.django import DjangoModelFactory
from pytest_factoryboy import register

from convenimus.adapters.db.django.models import (
    CfsSubmission,
    Event,
    EventCfsLabel,
    Group,
    GroupSponsor,
    Kind,
    Meeting,
    Session,
    SessionProposal,
)
from tests.integration.factories import CommunityFactory, UserFactory

pytest.register_assert_rewrite("tests.integration.utils")

register(UserFactory)


@pytest.fixture(autouse=True)
def _django_db(transactional_db):
    pass


class GroupFactory(DjangoModelFactory):
    class Meta:
        model = Group

    community = SubFactory(CommunityFactory)
    name = Faker("company")
    slug = Faker("slug")


class GroupSponsorFactory(DjangoModelFactory):
    class Meta:
        model = GroupSponsor

    group = SubFactory(GroupFactory)
    name = Faker("company")


class EventFactory(DjangoModelFactory):
    class Meta:
        model = Event

    group = SubFactory(GroupFactory)
    name = Faker("sentence", nb_words=4)
    slug = Faker("slug")
    description = Faker("text")
    kind = Kind.VIRTUAL
    timezone = "UTC"
    published = True
    starts_at = LazyAttribute(
        lambda __: (datetime.now(UTC) + timedelta(days=7)).replace(microsecond=0)
    )
    ends_at = LazyAttribute(lambda o: o.starts_at + timedelta(hours=8))


class EventCfsLabelFactory(DjangoModelFactory):
    class Meta:
        model = EventCfsLabel

    event = SubFactory(EventFactory)
    name = Faker("word")
    color = Faker("color_name")


class SessionProposalFactory(DjangoModelFactory):
    class Meta:
        model = SessionProposal

    user = SubFactory(UserFactory)
    title = Faker("sentence", nb_words=5)
    description = Faker("text")


class CfsSubmissionFactory(DjangoModelFactory):
    class Meta:
        model = CfsSubmission

    event = SubFactory(EventFactory)
    session_proposal = SubFactory(SessionProposalFactory)


class SessionFactory(DjangoModelFactory):
    class Meta:
        model = Session

    event = SubFactory(EventFactory)
    name = Faker("sentence", nb_words=3)
    kind = Kind.VIRTUAL
    starts_at = LazyAttribute(lambda o: o.event.starts_at + timedelta(hours=1))
    ends_at = LazyAttribute(lambda o: o.starts_at + timedelta(hours=1))


class MeetingFactory(DjangoModelFactory):
    class Meta:
        model = Meeting

    meeting_provider_id = "zoom"
    provider_meeting_id = Faker("uuid4")
    join_url = Faker("url")


@pytest.fixture(name="community")
def community_fixture():
    return CommunityFactory()


@pytest.fixture(name="group")
def group_fixture(community):
    return GroupFactory(community=community)


@pytest.fixture(name="reviewer")
def reviewer_fixture(community, group):
    reviewer = UserFactory(community=community, name="Grace Hopper")
    group.team_members.add(reviewer)
    return reviewer


@pytest.fixture
def speaker(community):
    return UserFactory(community=community, name="Ada Lovelace")


@pytest.fixture(name="event")
def event_fixture(group):
    return EventFactory(group=group)


@pytest.fixture
def submission(event, speaker):
    return CfsSubmissionFactory(
        event=event, session_proposal=SessionProposalFactory(user=speaker)
    )


@pytest.fixture
def reviewer_client(client, reviewer):
    client.force_login(reviewer)
    return client

