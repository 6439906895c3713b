"""Shared pytest fixtures for authcommons tests."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from authcommons.config import get_settings
from authcommons.models import AuthenticationChallenge


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test against default settings, free of AUTHCOMMONS_ env vars."""
    for key in list(os.environ):
        if key.startswith("AUTHCOMMONS_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def grid_challenge() -> AuthenticationChallenge:
    """A populated grid challenge as issued mid-authentication."""
    return AuthenticationChallenge(
        name="GrIDsure", data="111112222233333", state="PPPPQQQQRRRR"
    )
