"""JSON wire schema for authentication responses and challenges.

The key tables below are the single source of truth for wire field names.
Input payloads are checked structurally with pydantic before they are turned
into model objects; anything malformed raises PayloadError.

Challenge data is always written under ``data``. Older peers wrote it under
``challenge``, which is still accepted on input when ``data`` is absent and
``wire.accept_legacy_data_key`` is enabled.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from authcommons.codes import ResponseCode, ResponseCodeView
from authcommons.config import get_settings
from authcommons.errors import PayloadError
from authcommons.models import (
    AuthenticationChallenge,
    AuthenticationResponse,
    SerializationResult,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key tables (attribute name -> wire key)
# ---------------------------------------------------------------------------
CHALLENGE_KEYS: Mapping[str, str] = MappingProxyType(
    {"name": "name", "data": "data", "state": "state"}
)
LEGACY_CHALLENGE_DATA_KEY = "challenge"

RESPONSE_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "username": "username",
        "status": "status",
        "response": "response",
        "challenge": "challenge",
    }
)

# Output only; ignored when decoding.
DERIVED_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "is_authenticated": "isAuthenticated",
        "is_denied": "isDenied",
        "is_challenged": "isChallenged",
    }
)

RESPONSE_CODE_KEYS: Mapping[str, str] = MappingProxyType(
    {"name": "name", "code": "code"}
)


# ---------------------------------------------------------------------------
# Input validation models
# ---------------------------------------------------------------------------
class _ChallengePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    name: str | None = Field("", alias=CHALLENGE_KEYS["name"])
    data: str | None = Field("", alias=CHALLENGE_KEYS["data"])
    legacy_data: str | None = Field(None, alias=LEGACY_CHALLENGE_DATA_KEY)
    state: str | None = Field("", alias=CHALLENGE_KEYS["state"])


class _ResponsePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    username: str = Field(alias=RESPONSE_KEYS["username"])
    status: int | None = Field(None, alias=RESPONSE_KEYS["status"])
    response: str | int | dict[str, Any] | None = Field(
        None, alias=RESPONSE_KEYS["response"]
    )
    challenge: dict[str, Any] | None = Field(None, alias=RESPONSE_KEYS["challenge"])


M = TypeVar("M", bound=BaseModel)


def _validate(model: type[M], payload: Any, what: str) -> M:
    if not isinstance(payload, Mapping):
        msg = f"{what} payload must be a JSON object, got {type(payload).__name__}"
        raise PayloadError(msg)
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        msg = f"Invalid {what} payload: {exc}"
        raise PayloadError(msg) from exc


# ---------------------------------------------------------------------------
# ResponseCode
# ---------------------------------------------------------------------------
def encode_response_code(
    code: ResponseCode, view: ResponseCodeView | None = None
) -> str | dict[str, Any]:
    """Encode a ResponseCode according to ``view`` (default from settings)."""
    if view is None:
        view = get_settings().wire.response_view
    if view is ResponseCodeView.WITH_CODE:
        return {
            RESPONSE_CODE_KEYS["name"]: code.name,
            RESPONSE_CODE_KEYS["code"]: code.code,
        }
    return code.name


def decode_response_code(value: Any) -> ResponseCode:
    """Decode a ResponseCode from a name, an integer code, or the object form.

    Raises:
        UnknownResponseCodeError: If the name or code is not a member.
        PayloadError: If the value has the wrong shape, or the object form
            carries a name and code that disagree.
    """
    if isinstance(value, ResponseCode):
        return value
    if isinstance(value, str):
        return ResponseCode.from_name(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return ResponseCode.from_code(value)
    if isinstance(value, Mapping):
        name = value.get(RESPONSE_CODE_KEYS["name"])
        code = value.get(RESPONSE_CODE_KEYS["code"])
        if name is None and code is None:
            msg = "Response code object needs a 'name' or 'code' key"
            raise PayloadError(msg)
        by_name = ResponseCode.from_name(name) if name is not None else None
        by_code = ResponseCode.from_code(code) if code is not None else None
        if by_name is not None and by_code is not None and by_name is not by_code:
            msg = f"Response code name {name!r} does not match code {code!r}"
            raise PayloadError(msg)
        return by_name or by_code  # type: ignore[return-value]
    msg = f"Cannot decode response code from {type(value).__name__}"
    raise PayloadError(msg)


# ---------------------------------------------------------------------------
# AuthenticationChallenge
# ---------------------------------------------------------------------------
def challenge_to_dict(challenge: AuthenticationChallenge) -> dict[str, Any]:
    return {
        CHALLENGE_KEYS["name"]: challenge.name,
        CHALLENGE_KEYS["data"]: challenge.data,
        CHALLENGE_KEYS["state"]: challenge.state,
    }


def challenge_from_dict(
    payload: Any, accept_legacy_data_key: bool | None = None
) -> AuthenticationChallenge:
    """Decode a challenge object.

    Args:
        payload: Decoded JSON object.
        accept_legacy_data_key: Read ``challenge`` as the data key when
            ``data`` is absent. Defaults to the configured value.

    Raises:
        PayloadError: If the payload is not an object of string fields.
    """
    if accept_legacy_data_key is None:
        accept_legacy_data_key = get_settings().wire.accept_legacy_data_key
    parsed = _validate(_ChallengePayload, payload, "challenge")

    data = parsed.data
    given = parsed.model_fields_set
    if "data" not in given and "legacy_data" in given:
        if accept_legacy_data_key:
            logger.debug(
                "Reading challenge data from legacy key %r", LEGACY_CHALLENGE_DATA_KEY
            )
            data = parsed.legacy_data
        else:
            logger.warning(
                "Ignoring legacy challenge data key %r", LEGACY_CHALLENGE_DATA_KEY
            )

    return AuthenticationChallenge(name=parsed.name, data=data, state=parsed.state)


# ---------------------------------------------------------------------------
# AuthenticationResponse
# ---------------------------------------------------------------------------
def response_to_dict(
    response: AuthenticationResponse, view: ResponseCodeView | None = None
) -> dict[str, Any]:
    """Return the wire dict for ``response``, derived keys included."""
    return {
        RESPONSE_KEYS["username"]: response.username,
        RESPONSE_KEYS["status"]: response.status,
        RESPONSE_KEYS["response"]: encode_response_code(response.response, view),
        RESPONSE_KEYS["challenge"]: challenge_to_dict(response.challenge),
        DERIVED_KEYS["is_authenticated"]: response.is_authenticated,
        DERIVED_KEYS["is_denied"]: response.is_denied,
        DERIVED_KEYS["is_challenged"]: response.is_challenged,
    }


def response_from_dict(
    payload: Any, accept_legacy_data_key: bool | None = None
) -> AuthenticationResponse:
    """Decode a response object.

    ``status`` is applied before ``response``, so ``response`` wins when the
    two disagree. Derived classification keys in the payload are ignored.

    Raises:
        PayloadError: If the payload is structurally invalid.
        InvalidStatusCodeError: If ``status`` is not a known code.
        UnknownResponseCodeError: If ``response`` is not a known member.
    """
    parsed = _validate(_ResponsePayload, payload, "response")
    response = (
        decode_response_code(parsed.response) if parsed.response is not None else None
    )
    challenge = (
        challenge_from_dict(parsed.challenge, accept_legacy_data_key)
        if parsed.challenge is not None
        else None
    )
    return AuthenticationResponse.from_fields(
        username=parsed.username,
        status=parsed.status,
        response=response,
        challenge=challenge,
    )


def encode_response(
    response: AuthenticationResponse,
    view: ResponseCodeView | None = None,
    indent: int | None = None,
) -> SerializationResult:
    """Encode ``response`` as JSON text.

    Never raises for encoding problems; check ``result.success``.
    """
    if indent is None:
        indent = get_settings().wire.indent
    try:
        payload = json.dumps(response_to_dict(response, view), indent=indent)
    except (TypeError, ValueError) as exc:
        logger.warning("Failed to encode response for %r: %s", response.username, exc)
        return SerializationResult(success=False, error=f"{type(exc).__name__}: {exc}")
    return SerializationResult(success=True, payload=payload)


def decode_response(
    text: str | bytes, accept_legacy_data_key: bool | None = None
) -> AuthenticationResponse:
    """Decode JSON text into an AuthenticationResponse.

    Raises:
        PayloadError: If the text is not valid JSON or not a response object.
        InvalidStatusCodeError: If ``status`` is not a known code.
        UnknownResponseCodeError: If ``response`` is not a known member.
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"Response payload is not valid JSON: {exc}"
        raise PayloadError(msg) from exc
    return response_from_dict(payload, accept_legacy_data_key)
