"""Secret providers for the Process Link API key.

The client never stores the API key itself.  It asks a
:class:`SecretProvider` for it on every upload, so hosts can plug in their
own encrypted credential store.  Two simple providers ship with the SDK.

Usage::

    from processlink.credentials import EnvSecretProvider

    secrets = EnvSecretProvider()          # reads $PROCESSLINK_API_KEY
    assert isinstance(secrets, SecretProvider)
"""

from __future__ import annotations

import os
from typing import Protocol, runtime_checkable

DEFAULT_API_KEY_ENV = "PROCESSLINK_API_KEY"


def mask_secret(value: str | None) -> str:
    """Return a printable stand-in for *value* showing at most its last 4 chars."""
    if not value:
        return "<unset>"
    return f"...{value[-4:]}" if len(value) >= 8 else "****"


@runtime_checkable
class SecretProvider(Protocol):
    """Protocol that any credential store must satisfy."""

    def get_api_key(self) -> str | None:
        """Return the API key, or ``None`` / ``""`` when none is stored."""
        ...


class StaticSecretProvider:
    """Holds an API key in memory.  The key never appears in ``repr()``."""

    __slots__ = ("_api_key",)

    def __init__(self, api_key: str | None) -> None:
        self._api_key = api_key

    def get_api_key(self) -> str | None:
        return self._api_key

    def __repr__(self) -> str:
        return f"StaticSecretProvider(api_key={mask_secret(self._api_key)!r})"


class EnvSecretProvider:
    """Reads the API key from an environment variable at lookup time.

    Parameters
    ----------
    variable:
        Environment variable name.  Defaults to ``PROCESSLINK_API_KEY``.
    """

    __slots__ = ("variable",)

    def __init__(self, variable: str = DEFAULT_API_KEY_ENV) -> None:
        self.variable = variable

    def get_api_key(self) -> str | None:
        return os.environ.get(self.variable)

    def __repr__(self) -> str:
        return f"EnvSecretProvider(variable={self.variable!r})"
