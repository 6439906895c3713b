"""Exception hierarchy for authcommons.

Lookup and decoding failures are raised so that callers never mistake an
internal encoding problem for a genuine authentication denial.
"""

from __future__ import annotations


class AuthCommonsError(Exception):
    """Base class for all authcommons errors."""


class UnknownResponseCodeError(AuthCommonsError, LookupError):
    """No ResponseCode member matches the given wire value."""

    def __init__(self, code: object) -> None:
        self.code = code
        super().__init__(f"Unknown response code: {code!r}")


class InvalidStatusCodeError(AuthCommonsError, ValueError):
    """An integer status could not be applied to an AuthenticationResponse."""

    def __init__(self, status: object) -> None:
        self.status = status
        super().__init__(f"Invalid status code: {status!r}")


class SerializationError(AuthCommonsError):
    """Encoding an object to its JSON wire form failed."""


class PayloadError(AuthCommonsError, ValueError):
    """A wire payload is not valid JSON or does not match the schema."""
