from http import HTTPStatus
from typing import Any

from django.http import HttpResponse


def assert_json_response(
    response: HttpResponse, status_code: HTTPStatus, **json_fields: Any
) -> None:
    assert response.status_code == status_code, response.content
    data = response.json()
    for key, value in json_fields.items():
        assert data[key] == value, data
