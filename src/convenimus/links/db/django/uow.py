from __future__ import annotations

from contextlib import contextmanager
from functools import cached_property
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction

from convenimus.links.db.django import repositories
from convenimus.links.db.django.storage import Storage
from convenimus.pacts import ConstraintViolationError, UnitOfWorkProtocol

if TYPE_CHECKING:
    from collections.abc import Iterator


class UnitOfWork(UnitOfWorkProtocol):
    def __init__(self) -> None:
        self._storage = Storage()

    @staticmethod
    @contextmanager
    def atomic() -> Iterator[None]:
        try:
            with transaction.atomic():
                yield
        except IntegrityError as exception:
            raise ConstraintViolationError(str(exception)) from exception

    @cached_property
    def cfs_labels(self) -> repositories.CfsLabelRepository:
        return repositories.CfsLabelRepository()

    @cached_property
    def cfs_submissions(self) -> repositories.CfsSubmissionRepository:
        return repositories.CfsSubmissionRepository(self._storage)

    @cached_property
    def events(self) -> repositories.EventRepository:
        return repositories.EventRepository(self._storage)

    @cached_property
    def groups(self) -> repositories.GroupRepository:
        return repositories.GroupRepository(self._storage)

    @cached_property
    def sessions(self) -> repositories.SessionRepository:
        return repositories.SessionRepository(self._storage)
