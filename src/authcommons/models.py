"""Value objects exchanged between an authentication client and server.

These are frozen dataclasses: every update returns a new object, so a
response can be handed between layers without shared-mutation hazards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from authcommons.codes import (
    AUTHENTICATED_CODES,
    CHALLENGED_CODES,
    DENIED_CODES,
    ResponseCode,
)
from authcommons.errors import (
    InvalidStatusCodeError,
    SerializationError,
    UnknownResponseCodeError,
)

if TYPE_CHECKING:
    from authcommons.codes import ResponseCodeView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerializationResult:
    """Result of encoding an object to JSON.

    Attributes:
        success: Whether encoding succeeded.
        payload: The JSON text (if successful).
        error: Description of the failure (if unsuccessful).
    """

    success: bool
    payload: str | None = None
    error: str | None = None

    def unwrap(self) -> str:
        """Return the payload, or raise SerializationError on failure."""
        if not self.success or self.payload is None:
            raise SerializationError(self.error or "serialization failed")
        return self.payload


@dataclass(frozen=True)
class AuthenticationChallenge:
    """A secondary authentication step presented to the user.

    Attributes:
        name: Challenge type, e.g. ``"GrIDsure"``.
        data: Opaque challenge payload, e.g. masked grid coordinates.
        state: Progress marker carried across requests.

    Only ``state`` turns None into an empty string; ``name`` and ``data``
    are stored as given.
    """

    name: str = ""
    data: str = ""
    state: str = ""

    def __post_init__(self) -> None:
        if self.state is None:
            object.__setattr__(self, "state", "")

    def with_name(self, name: str) -> AuthenticationChallenge:
        return replace(self, name=name)

    def with_data(self, data: str) -> AuthenticationChallenge:
        return replace(self, data=data)

    def with_state(self, state: str | None) -> AuthenticationChallenge:
        # __post_init__ maps None to ""
        return replace(self, state=state)

    @property
    def is_empty(self) -> bool:
        """True when no challenge is present."""
        return not (self.name or self.data or self.state)


@dataclass(frozen=True)
class AuthenticationResponse:
    """Outcome of an authentication attempt for one user.

    ``status`` mirrors ``response.code``. The two are updated together by
    :meth:`with_status` and :meth:`with_response`, except that
    ``with_status(None)`` only forces ``status`` to AUTH_FAILURE and leaves
    ``response`` untouched.

    A bare ``AuthenticationResponse(username)`` is a denial with an empty
    challenge. When ``status`` is omitted it is taken from ``response``; an
    explicit ``status`` that disagrees with ``response`` is rejected, and a
    None challenge becomes the empty challenge.

    Attributes:
        username: Name of the user from the request.
        status: Integer status code; drives the classification properties.
        response: The ResponseCode member.
        challenge: Challenge attributes; empty when no challenge applies.
    """

    username: str
    status: int | None = None
    response: ResponseCode = ResponseCode.AUTH_FAILURE
    challenge: AuthenticationChallenge = field(default_factory=AuthenticationChallenge)

    def __post_init__(self) -> None:
        if self.status is None:
            object.__setattr__(self, "status", self.response.code)
        elif self.status != self.response.code:
            logger.warning(
                "Status %r disagrees with response %s for user %r",
                self.status,
                self.response.name,
                self.username,
            )
            raise InvalidStatusCodeError(self.status)
        if self.challenge is None:
            object.__setattr__(self, "challenge", AuthenticationChallenge())

    def _evolve(self, **changes: Any) -> AuthenticationResponse:
        """Copy with ``changes``, carrying ``status`` over verbatim.

        Status is re-derived from ``response`` by the constructor and then
        restored, so the copy keeps a status forced by ``with_status(None)``.
        """
        status = changes.pop("status", self.status)
        result = replace(self, status=None, **changes)
        if result.status != status:
            object.__setattr__(result, "status", status)
        return result

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        username: str,
        response: ResponseCode | None = None,
        challenge: AuthenticationChallenge | None = None,
    ) -> AuthenticationResponse:
        """Build a response from a username and optional outcome.

        Args:
            username: Name of the user from the request.
            response: Outcome code. None keeps the AUTH_FAILURE default.
            challenge: Challenge to attach. None keeps the empty challenge.

        Returns:
            A new AuthenticationResponse.
        """
        result = cls(username).with_status(response)
        if challenge is not None:
            result = result.with_challenge(challenge)
        return result

    @classmethod
    def from_fields(
        cls,
        username: str,
        status: int | None,
        response: ResponseCode | None,
        challenge: AuthenticationChallenge | None,
    ) -> AuthenticationResponse:
        """Rebuild a response from decoded wire fields.

        The integer ``status`` is applied first, then an explicit
        ``response`` overwrites it. When the two disagree, ``response`` wins.

        Args:
            username: Name of the user.
            status: Integer status from the wire, or None if absent.
            response: ResponseCode from the wire, or None if absent.
            challenge: Decoded challenge, or None if absent.

        Returns:
            A new AuthenticationResponse.

        Raises:
            InvalidStatusCodeError: If ``status`` is not a known code.
        """
        result = cls(username)
        if status is not None:
            result = result.with_status(status)
        if response is not None:
            result = result.with_response(response)
        return result.with_challenge(challenge)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------
    def with_status(self, status: ResponseCode | int | None) -> AuthenticationResponse:
        """Return a copy with the given status.

        Args:
            status: A ResponseCode, an integer wire code, or None.

        Returns:
            A new AuthenticationResponse. None forces ``status`` to
            AUTH_FAILURE but keeps the current ``response``.

        Raises:
            InvalidStatusCodeError: If an integer status is not a known code.
        """
        if status is None:
            return self._evolve(status=ResponseCode.AUTH_FAILURE.code)
        if isinstance(status, ResponseCode):
            return replace(self, status=None, response=status)
        try:
            response = ResponseCode.from_code(status)
        except UnknownResponseCodeError as exc:
            logger.warning("Rejecting status %r for user %r", status, self.username)
            raise InvalidStatusCodeError(status) from exc
        return replace(self, status=None, response=response)

    def with_response(self, response: ResponseCode) -> AuthenticationResponse:
        """Return a copy with ``response`` and ``status`` both set."""
        return replace(self, status=None, response=response)

    def with_challenge(
        self, challenge: AuthenticationChallenge | None
    ) -> AuthenticationResponse:
        """Return a copy carrying ``challenge`` (None means empty challenge)."""
        if challenge is None:
            challenge = AuthenticationChallenge()
        return self._evolve(challenge=challenge)

    def with_username(self, username: str) -> AuthenticationResponse:
        return self._evolve(username=username)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------
    @property
    def is_authenticated(self) -> bool:
        """True if the authentication succeeded."""
        return self.status in AUTHENTICATED_CODES

    @property
    def is_denied(self) -> bool:
        """True if the authentication (or a PIN/password change) was denied."""
        return self.status in DENIED_CODES

    @property
    def is_challenged(self) -> bool:
        """True if a further challenge-response step is required."""
        return self.status in CHALLENGED_CODES

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self, view: ResponseCodeView | None = None) -> dict[str, Any]:
        """Return the wire dict, including the derived classification keys."""
        from authcommons.wire import response_to_dict

        return response_to_dict(self, view=view)

    def to_json(self, view: ResponseCodeView | None = None) -> SerializationResult:
        """Encode to JSON. Failures are reported in the result, not raised."""
        from authcommons.wire import encode_response

        return encode_response(self, view=view)

    @classmethod
    def from_dict(cls, payload: Any) -> AuthenticationResponse:
        from authcommons.wire import response_from_dict

        return response_from_dict(payload)

    @classmethod
    def from_json(cls, text: str | bytes) -> AuthenticationResponse:
        """Decode a JSON payload produced by :meth:`to_json`."""
        from authcommons.wire import decode_response

        return decode_response(text)

    def __str__(self) -> str:
        result = self.to_json()
        if not result.success:
            logger.error(
                "Could not serialize response for %r: %s", self.username, result.error
            )
            return ""
        return result.payload or ""
