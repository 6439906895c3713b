"""Authentication response codes and their classification.

Each ResponseCode member carries a stable integer wire code. Codes follow the
SafeNet authentication agent numbering; code 3 (SERVER_PIN_PROVIDED) is
reserved and must never be assigned to another member.
"""

from __future__ import annotations

import logging
from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from authcommons.errors import UnknownResponseCodeError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


class ResponseCode(IntEnum):
    """Outcome of an authentication attempt, as sent on the wire."""

    AUTH_SUCCESS = 0
    AUTH_FAILURE = 1  # default deny
    AUTH_CHALLENGE = 2
    USER_PIN_CHANGE = 4
    OUTER_WINDOW_AUTH = 5
    CHANGE_STATIC_PASSWORD = 6
    STATIC_CHANGE_FAILED = 7
    PIN_CHANGE_FAILED = 8

    @property
    def code(self) -> int:
        """Integer wire code of this member."""
        return int(self)

    @classmethod
    def from_code(cls, code: int) -> ResponseCode:
        """Return the member whose wire code equals ``code``.

        Args:
            code: Integer wire code.

        Returns:
            The matching ResponseCode member.

        Raises:
            UnknownResponseCodeError: If no member has this code. Booleans and
                non-integers never match.
        """
        if isinstance(code, int) and not isinstance(code, bool):
            member = _BY_CODE.get(int(code))
            if member is not None:
                return member
        logger.debug("Response code lookup miss: %r", code)
        raise UnknownResponseCodeError(code)

    @classmethod
    def from_name(cls, name: str) -> ResponseCode:
        """Return the member with the given name (e.g. ``"AUTH_SUCCESS"``).

        Raises:
            UnknownResponseCodeError: If ``name`` is not a member name.
        """
        member = _BY_NAME.get(name) if isinstance(name, str) else None
        if member is None:
            logger.debug("Response name lookup miss: %r", name)
            raise UnknownResponseCodeError(name)
        return member


# Built once at import, read-only afterwards.
_BY_CODE: Mapping[int, ResponseCode] = MappingProxyType(
    {member.code: member for member in ResponseCode}
)
_BY_NAME: Mapping[str, ResponseCode] = MappingProxyType(
    {member.name: member for member in ResponseCode}
)

AUTHENTICATED_CODES: frozenset[int] = frozenset({ResponseCode.AUTH_SUCCESS.code})

DENIED_CODES: frozenset[int] = frozenset(
    {
        ResponseCode.AUTH_FAILURE.code,
        ResponseCode.PIN_CHANGE_FAILED.code,
        ResponseCode.STATIC_CHANGE_FAILED.code,
    }
)

CHALLENGED_CODES: frozenset[int] = frozenset(
    {
        ResponseCode.AUTH_CHALLENGE.code,
        ResponseCode.USER_PIN_CHANGE.code,
        ResponseCode.CHANGE_STATIC_PASSWORD.code,
        ResponseCode.OUTER_WINDOW_AUTH.code,
    }
)


class ResponseCodeView(StrEnum):
    """How a ResponseCode is rendered in JSON output.

    STANDARD writes the member name. WITH_CODE writes an object carrying both
    the name and the integer code.
    """

    STANDARD = "standard"
    WITH_CODE = "with_code"


def classify(status: int) -> str | None:
    """Return ``"authenticated"``, ``"denied"``, ``"challenged"`` or None."""
    if status in AUTHENTICATED_CODES:
        return "authenticated"
    if status in DENIED_CODES:
        return "denied"
    if status in CHALLENGED_CODES:
        return "challenged"
    return None
