"""Tests for the JSON wire encoding of responses and challenges."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from authcommons.codes import ResponseCode, ResponseCodeView
from authcommons.errors import (
    InvalidStatusCodeError,
    PayloadError,
    SerializationError,
    UnknownResponseCodeError,
)
from authcommons.models import AuthenticationChallenge, AuthenticationResponse
from authcommons.wire import (
    challenge_from_dict,
    challenge_to_dict,
    decode_response,
    decode_response_code,
    encode_response,
    encode_response_code,
    response_from_dict,
    response_to_dict,
)

if TYPE_CHECKING:
    from authcommons.models import SerializationResult


@pytest.fixture
def challenged(grid_challenge: AuthenticationChallenge) -> AuthenticationResponse:
    return AuthenticationResponse.create(
        "bob", ResponseCode.AUTH_CHALLENGE, grid_challenge
    )


class TestEncoding:
    """Shape of the encoded response."""

    def test_response_dict_shape(self, challenged: AuthenticationResponse) -> None:
        assert response_to_dict(challenged) == {
            "username": "bob",
            "status": 2,
            "response": "AUTH_CHALLENGE",
            "challenge": {
                "name": "GrIDsure",
                "data": "111112222233333",
                "state": "PPPPQQQQRRRR",
            },
            "isAuthenticated": False,
            "isDenied": False,
            "isChallenged": True,
        }

    def test_challenge_data_written_under_data_key(
        self, grid_challenge: AuthenticationChallenge
    ) -> None:
        encoded = challenge_to_dict(grid_challenge)
        assert encoded["data"] == "111112222233333"
        assert "challenge" not in encoded

    def test_with_code_view(self) -> None:
        assert encode_response_code(
            ResponseCode.OUTER_WINDOW_AUTH, ResponseCodeView.WITH_CODE
        ) == {"name": "OUTER_WINDOW_AUTH", "code": 5}

    def test_view_defaults_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTHCOMMONS_WIRE__RESPONSE_VIEW", "with_code")
        encoded = AuthenticationResponse("alice").to_dict()
        assert encoded["response"] == {"name": "AUTH_FAILURE", "code": 1}

    def test_indent_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTHCOMMONS_WIRE__INDENT", "2")
        payload = AuthenticationResponse("alice").to_json().unwrap()
        assert payload.startswith('{\n  "username"')

    def test_str_is_canonical_json(self, challenged: AuthenticationResponse) -> None:
        assert json.loads(str(challenged)) == response_to_dict(challenged)


class TestSerializationFailure:
    """Encoding failures come back as a result value."""

    @pytest.fixture
    def broken(self) -> AuthenticationResponse:
        return AuthenticationResponse(username=object())  # type: ignore[arg-type]

    def test_failure_is_reported_not_raised(
        self, broken: AuthenticationResponse
    ) -> None:
        result: SerializationResult = encode_response(broken)
        assert result.success is False
        assert result.payload is None
        assert result.error is not None
        assert "TypeError" in result.error

    def test_unwrap_raises(self, broken: AuthenticationResponse) -> None:
        with pytest.raises(SerializationError):
            broken.to_json().unwrap()

    def test_str_logs_and_returns_empty(
        self, broken: AuthenticationResponse, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="authcommons.models"):
            assert str(broken) == ""
        assert "Could not serialize response" in caplog.text


class TestRoundTrip:
    """Encode then decode yields an equal object."""

    def test_challenged_response(self, challenged: AuthenticationResponse) -> None:
        payload = challenged.to_json().unwrap()
        assert AuthenticationResponse.from_json(payload) == challenged

    def test_with_code_view(self, challenged: AuthenticationResponse) -> None:
        payload = challenged.to_json(view=ResponseCodeView.WITH_CODE).unwrap()
        assert decode_response(payload) == challenged

    def test_dict_round_trip(self, challenged: AuthenticationResponse) -> None:
        assert AuthenticationResponse.from_dict(challenged.to_dict()) == challenged

    def test_forced_failure_status_decodes_as_response(self) -> None:
        """with_status(None) writes a failure status next to the old response.

        On decode the response wins, so the peer sees the original outcome.
        """
        forced = AuthenticationResponse.create(
            "alice", ResponseCode.AUTH_SUCCESS
        ).with_status(None)
        encoded = forced.to_dict()
        assert encoded["status"] == ResponseCode.AUTH_FAILURE.code
        assert encoded["response"] == "AUTH_SUCCESS"
        assert encoded["isDenied"] is True

        decoded = AuthenticationResponse.from_json(forced.to_json().unwrap())
        assert decoded.response is ResponseCode.AUTH_SUCCESS
        assert decoded.status == ResponseCode.AUTH_SUCCESS.code
        assert decoded.is_authenticated is True
        assert decoded != forced


class TestDecoding:
    """Decoding rules, precedence and tolerance."""

    def test_response_field_wins_over_status(self) -> None:
        payload = json.dumps(
            {
                "username": "carol",
                "status": ResponseCode.AUTH_SUCCESS.code,
                "response": "AUTH_FAILURE",
                "challenge": {},
            }
        )
        response = decode_response(payload)
        assert response.response is ResponseCode.AUTH_FAILURE
        assert response.is_denied is True
        assert response.is_authenticated is False

    def test_derived_keys_are_ignored(self) -> None:
        response = response_from_dict(
            {"username": "eve", "response": "AUTH_FAILURE", "isAuthenticated": True}
        )
        assert response.is_authenticated is False

    def test_missing_challenge_gives_empty_challenge(self) -> None:
        response = response_from_dict({"username": "eve", "status": 0})
        assert response.challenge == AuthenticationChallenge()
        assert response.is_authenticated is True

    def test_missing_status_and_response_defaults_to_failure(self) -> None:
        assert response_from_dict({"username": "eve"}) == AuthenticationResponse("eve")

    def test_bytes_payload(self) -> None:
        response = decode_response(b'{"username": "eve", "response": "AUTH_SUCCESS"}')
        assert response.is_authenticated is True

    def test_null_state_becomes_empty(self) -> None:
        challenge = challenge_from_dict({"name": "GrIDsure", "state": None})
        assert challenge.state == ""
        assert challenge.data == ""

    def test_unknown_challenge_keys_ignored(self) -> None:
        challenge = challenge_from_dict({"name": "GrIDsure", "extra": 1})
        assert challenge == AuthenticationChallenge(name="GrIDsure")


class TestLegacyDataKey:
    """Challenge data under the old ``challenge`` key."""

    def test_legacy_key_accepted_by_default(self) -> None:
        challenge = challenge_from_dict({"name": "GrIDsure", "challenge": "12345"})
        assert challenge.data == "12345"

    def test_data_key_takes_precedence(self) -> None:
        challenge = challenge_from_dict({"data": "new", "challenge": "old"})
        assert challenge.data == "new"

    def test_legacy_key_can_be_disabled(self) -> None:
        challenge = challenge_from_dict(
            {"challenge": "12345"}, accept_legacy_data_key=False
        )
        assert challenge.data == ""

    def test_legacy_key_setting(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTHCOMMONS_WIRE__ACCEPT_LEGACY_DATA_KEY", "false")
        response = response_from_dict(
            {"username": "bob", "challenge": {"challenge": "12345"}}
        )
        assert response.challenge.data == ""


class TestResponseCodeDecoding:
    """decode_response_code accepts names, integers and the object form."""

    @pytest.mark.parametrize(
        "value",
        ["USER_PIN_CHANGE", 4, {"name": "USER_PIN_CHANGE"}, {"code": 4}],
    )
    def test_accepted_forms(self, value: object) -> None:
        assert decode_response_code(value) is ResponseCode.USER_PIN_CHANGE

    def test_mismatched_object_form(self) -> None:
        with pytest.raises(PayloadError):
            decode_response_code({"name": "AUTH_SUCCESS", "code": 1})

    def test_empty_object_form(self) -> None:
        with pytest.raises(PayloadError):
            decode_response_code({})

    @pytest.mark.parametrize("value", [True, 1.5, ["AUTH_SUCCESS"]])
    def test_wrong_shape(self, value: object) -> None:
        with pytest.raises(PayloadError):
            decode_response_code(value)


class TestDecodingErrors:
    """Malformed or unknown input fails explicitly."""

    def test_invalid_json(self) -> None:
        with pytest.raises(PayloadError):
            decode_response("{not json")

    def test_non_object(self) -> None:
        with pytest.raises(PayloadError):
            decode_response("[1, 2, 3]")

    def test_missing_username(self) -> None:
        with pytest.raises(PayloadError):
            response_from_dict({"status": 0})

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": 7},
            {"username": "eve", "status": "0"},
            {"username": "eve", "status": True},
            {"username": "eve", "challenge": "GrIDsure"},
            {"username": "eve", "challenge": {"name": 5}},
        ],
    )
    def test_wrong_types(self, payload: dict[str, object]) -> None:
        with pytest.raises(PayloadError):
            response_from_dict(payload)

    def test_unknown_status(self) -> None:
        with pytest.raises(InvalidStatusCodeError):
            response_from_dict({"username": "eve", "status": 9999})

    def test_unknown_response_name(self) -> None:
        with pytest.raises(UnknownResponseCodeError):
            response_from_dict({"username": "eve", "response": "AUTH_MAYBE"})
