"""Secure credential storage for pdfvoice speech-engine keys.

Responsibilities:
- Persist up to three rotation keys in the OS keyring.
- Return stored keys in slot order so quota rotation stays deterministic.
- Never echo secret values back to callers beyond the key itself.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

_DEFAULT_SERVICE_NAME = "pdfvoice"
_ACCOUNT_NAMES = ("openai_api_key", "openai_api_key_2", "openai_api_key_3")


class CredentialStore:
    """Interface for secure credential operations over ordered key slots."""

    slot_count: int = len(_ACCOUNT_NAMES)

    def get_api_keys(self) -> tuple[str, ...]:
        """Return stored keys ordered by slot, skipping empty slots."""

        raise NotImplementedError

    def set_api_key(self, api_key: str, slot: int = 1) -> None:
        """Persist a key into the given 1-based slot."""

        raise NotImplementedError

    def clear_api_keys(self) -> int:
        """Delete every stored key and return how many were removed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def _account(self, slot: int) -> str:
        if not 1 <= slot <= len(_ACCOUNT_NAMES):
            raise ValueError(f"Credential slot must be between 1 and {len(_ACCOUNT_NAMES)}.")
        return _ACCOUNT_NAMES[slot - 1]

    def get_api_keys(self) -> tuple[str, ...]:
        keys: list[str] = []
        for account in _ACCOUNT_NAMES:
            try:
                value = keyring.get_password(self.service_name, account)
            except KeyringError:
                return tuple(keys)
            if value is not None and value.strip():
                keys.append(value.strip())
        return tuple(keys)

    def set_api_key(self, api_key: str, slot: int = 1) -> None:
        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        try:
            keyring.set_password(self.service_name, self._account(slot), normalized)
        except KeyringError as exc:
            raise RuntimeError(
                "Secure credential storage is unavailable in this environment "
                f"({type(exc).__name__})."
            ) from exc

    def clear_api_keys(self) -> int:
        removed = 0
        for account in _ACCOUNT_NAMES:
            try:
                if keyring.get_password(self.service_name, account) is None:
                    continue
                keyring.delete_password(self.service_name, account)
            except PasswordDeleteError:
                continue
            except KeyringError:
                break
            removed += 1
        return removed


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
