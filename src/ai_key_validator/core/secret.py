"""Scoped handling of API key material.

Key material is acquired for the lifetime of a single validation request
and released on every exit path. While held, it is wrapped in a pydantic
``SecretStr`` so accidental ``repr``/``str``/serialization never reveals it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import SecretStr

from ai_key_validator.core.errors import SecretReleasedError
from ai_key_validator.utils.redaction import redact_secret

if TYPE_CHECKING:
    from types import TracebackType


class ScopedSecret:
    """A key value with a guaranteed-release contract.

    Use as a context manager; the value is dropped when the block exits,
    whether it returns, raises, times out or is cancelled.

    Example:
        ```python
        with ScopedSecret(raw_key) as secret:
            headers = {"Authorization": f"Bearer {secret.reveal()}"}
        assert secret.released
        ```
    """

    __slots__ = ("_length", "_value")

    def __init__(self, value: str) -> None:
        """Wrap a raw key value.

        Args:
            value: The key material.
        """
        self._value: SecretStr | None = SecretStr(value)
        self._length = len(value)

    @property
    def released(self) -> bool:
        """Whether the key material has been dropped."""
        return self._value is None

    def reveal(self) -> str:
        """Return the raw key material.

        Raises:
            SecretReleasedError: If the secret was already released.
        """
        if self._value is None:
            raise SecretReleasedError("Key material has already been released")
        return self._value.get_secret_value()

    def masked(self) -> str:
        """Return a redacted form suitable for display."""
        if self._value is None:
            return "<released>"
        return redact_secret(self._value.get_secret_value())

    def release(self) -> None:
        """Drop the key material. Safe to call more than once."""
        self._value = None

    def __len__(self) -> int:
        """Return the length of the original key."""
        return self._length

    def __enter__(self) -> ScopedSecret:
        """Enter the secret's scope."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Release the secret on scope exit."""
        self.release()

    def __repr__(self) -> str:
        """Return a representation that never includes the key."""
        state = "released" if self.released else "held"
        return f"<ScopedSecret({state}, length={self._length})>"

    __str__ = __repr__
