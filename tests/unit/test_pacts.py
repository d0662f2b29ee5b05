import pytest
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from convenimus.pacts import (
    ConvenimusError,
    EventMeetingState,
    EventUpdateData,
    HostRef,
    MeetingRequest,
    NotFoundError,
    SpeakerRef,
)


class TestMeetingRequest:
    @pytest.mark.parametrize(
        ("flag", "expected"),
        [
            (None, MeetingRequest.ABSENT),
            (False, MeetingRequest.FALSE),
            (True, MeetingRequest.TRUE),
        ],
    )
    def test_from_flag(self, flag, expected):
        assert MeetingRequest.from_flag(flag) is expected

    def test_only_true_is_requested(self):
        assert [request.is_requested for request in MeetingRequest] == [
            False,
            False,
            True,
        ]


class TestConvenimusError:
    def test_message(self):
        assert NotFoundError("submission not found").message == "submission not found"

    def test_empty_message(self):
        assert ConvenimusError().message == ""


class TestEventMeetingState:
    def test_accepts_host_ids_and_speaker_dicts(self):
        state = EventMeetingState.model_validate(
            {
                "hosts": [1, {"user_id": 2}],
                "kind": "hybrid",
                "name": "Sprint",
                "speakers": [{"user_id": 3}],
                "timezone": "UTC",
                "sessions": [],
            }
        )

        assert state.hosts == [1, HostRef(user_id=2)]
        assert state.speakers == [SpeakerRef(user_id=3, featured=False)]
        assert state.meeting_requested is None


class TestEventUpdateData:
    def test_requires_name_kind_and_timezone(self):
        with pytest.raises(PydanticValidationError):
            TypeAdapter(EventUpdateData).validate_python({"name": "Sprint"})

    def test_parses_nested_sessions(self):
        payload = TypeAdapter(EventUpdateData).validate_json(
            '{"name": "Sprint", "kind": "virtual", "timezone": "Europe/Warsaw",'
            ' "sessions": [{"name": "Intro", "kind": "in-person",'
            ' "starts_at": "2030-05-01T10:00:00"}]}'
        )

        session = payload["sessions"][0]
        assert session["starts_at"].tzinfo is None
        assert session["kind"] == "in-person"
        assert "session_id" not in session
