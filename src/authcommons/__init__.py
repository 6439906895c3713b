"""authcommons - shared data model for an authentication protocol exchange.

Response codes, challenge and response value objects, and their JSON wire
encoding, shared by an authentication client and server.

Usage:
    from authcommons import AuthenticationResponse, ResponseCode

    response = AuthenticationResponse.create("alice", ResponseCode.AUTH_SUCCESS)
    payload = response.to_json().unwrap()
    assert AuthenticationResponse.from_json(payload).is_authenticated
"""

import logging

from authcommons.codes import (
    AUTHENTICATED_CODES,
    CHALLENGED_CODES,
    DENIED_CODES,
    ResponseCode,
    ResponseCodeView,
)
from authcommons.errors import (
    AuthCommonsError,
    InvalidStatusCodeError,
    PayloadError,
    SerializationError,
    UnknownResponseCodeError,
)
from authcommons.models import (
    AuthenticationChallenge,
    AuthenticationResponse,
    SerializationResult,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AUTHENTICATED_CODES",
    "CHALLENGED_CODES",
    "DENIED_CODES",
    "AuthCommonsError",
    "AuthenticationChallenge",
    "AuthenticationResponse",
    "InvalidStatusCodeError",
    "PayloadError",
    "ResponseCode",
    "ResponseCodeView",
    "SerializationError",
    "SerializationResult",
    "UnknownResponseCodeError",
    "__version__",
]
