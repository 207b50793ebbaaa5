"""
Credential references.

Tokens are configured as references (e.g., "env:GITHUB_TOKEN"), not raw
values, so configuration files and logs never carry the secret itself.

References look like "<provider>:<key>":
- env:VAR_NAME - environment variable
- file:PATH - file whose stripped contents are the token

The resolved `Credential` is passed explicitly into every storage call;
there is no process-wide auth state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class Credential:
    """A resolved access token and the reference it came from."""

    token: str
    ref: str = "inline"

    def __repr__(self) -> str:
        return f"Credential(ref={self.ref!r}, token=<redacted>)"

    def __bool__(self) -> bool:
        return bool(self.token)


class SecretsProvider(Protocol):
    """Looks up the token behind a reference such as "env:GITHUB_TOKEN"."""

    def get(self, ref: str) -> str | None:
        """
        Look up the token for `ref`.

        Args:
            ref: Token reference (e.g., "file:~/.gh-token")

        Returns:
            The token, or None if it is unset or empty.
        """
        ...

    def supports(self, ref: str) -> bool:
        """True if `ref` uses this provider's prefix."""
        ...


class EnvSecretsProvider:
    """
    Tokens held in environment variables.

    Example: "env:GITHUB_TOKEN" resolves to os.environ["GITHUB_TOKEN"]
    """

    PREFIX = "env:"

    def supports(self, ref: str) -> bool:
        return ref.startswith(self.PREFIX)

    def get(self, ref: str) -> str | None:
        if not self.supports(ref):
            return None
        var_name = ref[len(self.PREFIX) :]
        value = os.environ.get(var_name)
        return value.strip() if value else None


class FileSecretsProvider:
    """
    Resolve secrets from token files.

    Example: "file:~/.config/blogprune/token"
    """

    PREFIX = "file:"

    def supports(self, ref: str) -> bool:
        return ref.startswith(self.PREFIX)

    def get(self, ref: str) -> str | None:
        if not self.supports(ref):
            return None
        path = Path(ref[len(self.PREFIX) :]).expanduser()
        try:
            value = path.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return value or None


class CompositeSecretsProvider:
    """
    Chain of providers, consulted in order.

    The first provider that supports a reference and yields a token wins.
    """

    def __init__(self, providers: list[SecretsProvider] | None = None):
        self.providers = providers or [EnvSecretsProvider(), FileSecretsProvider()]

    def supports(self, ref: str) -> bool:
        return any(p.supports(ref) for p in self.providers)

    def get(self, ref: str) -> str | None:
        for provider in self.providers:
            if provider.supports(ref):
                value = provider.get(ref)
                if value is not None:
                    return value
        return None


def resolve_credential(
    ref: str | None,
    provider: SecretsProvider | None = None,
) -> Credential | None:
    """
    Resolve a token reference into a `Credential`.

    Returns None when the reference is empty, unsupported, or unresolvable;
    callers decide whether to prompt for a token instead.
    """
    if not ref:
        return None
    provider = provider or CompositeSecretsProvider()
    if not provider.supports(ref):
        return None
    value = provider.get(ref)
    if not value:
        return None
    return Credential(token=value, ref=ref)
