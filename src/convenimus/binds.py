from __future__ import annotations

from typing import TYPE_CHECKING

from convenimus.links.db.django.uow import UnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable

    from django.http import HttpRequest


class RepositoryInjectionMiddleware[Response]:
    """Attach a fresh unit of work to every request as ``request.uow``.

    Django has no dependency injection for views, so a middleware does it.
    """

    def __init__(self, get_response: Callable[[HttpRequest], Response]) -> None:
        self.get_response: Callable[[HttpRequest], Response] = get_response

    def __call__(self, request: HttpRequest) -> Response:
        request.uow = UnitOfWork()  # type: ignore[attr-defined]

        return self.get_response(request)
