import pytest

from convenimus.adapters.db.django.models import EventCfsLabel
from convenimus.links.db.django.uow import UnitOfWork
from convenimus.pacts import ConstraintViolationError, NotFoundError


class TestUnitOfWork:
    def test_integrity_error_becomes_constraint_violation(self, event):
        uow = UnitOfWork()

        with pytest.raises(ConstraintViolationError), uow.atomic():
            uow.cfs_labels.create(event.pk, {"name": "Web", "color": "blue"})
            uow.cfs_labels.create(event.pk, {"name": "Web", "color": "red"})

        assert not EventCfsLabel.objects.exists()

    def test_repositories_are_reused(self):
        uow = UnitOfWork()

        assert uow.events is uow.events
        assert uow.cfs_submissions is uow.cfs_submissions

    def test_missing_group(self):
        with pytest.raises(NotFoundError, match="group not found"):
            UnitOfWork().groups.read(404)

    def test_inactive_event_is_not_found(self, group, event):
        event.deleted = True
        event.save()
        uow = UnitOfWork()

        with (
            pytest.raises(NotFoundError, match="event not found or inactive"),
            uow.atomic(),
        ):
            uow.events.read_active(group.pk, event.pk)

    def test_event_belongs_to_group(self, group, event):
        uow = UnitOfWork()

        assert uow.events.belongs_to_group(event.pk, group.pk) is True
        assert uow.events.belongs_to_group(event.pk, group.pk + 1) is False
