import factory
from django.contrib.auth.hashers import make_password
from factory.django import DjangoModelFactory

from convenimus.adapters.db.django.models import Community, User


class CommunityFactory(DjangoModelFactory):
    class Meta:
        model = Community
        django_get_or_create = ("name",)

    display_name = factory.Faker("company")
    name = factory.Faker("slug")


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User

    email = factory.Faker("email")
    name = factory.Faker("name")
    password = factory.LazyFunction(lambda: make_password(None))
    username = factory.Faker("uuid4")
