"""Protocol definitions for the key-value store collaborator.

This module defines the contract the TUI consumes. It has no dependencies
on other project modules, so tests can satisfy it with an in-memory fake.

Every operation is fallible. Failures are raised as StoreError, never
returned, so callers can abort the triggering operation with one
``except StoreError`` and leave prior visible state intact.
"""

from dataclasses import dataclass
from typing import Protocol


class StoreError(Exception):
    """A connectivity or command error reported by the store."""


@dataclass(frozen=True)
class RankedMember:
    """One sorted-set member with its score."""

    member: str
    score: float


class StoreClient(Protocol):
    """Operations the browser needs from the store.

    The protocol uses structural typing, so adapters don't need to
    inherit from it.
    """

    def scan(self, cursor: int, pattern: str, limit: int) -> tuple[list[str], int]:
        """One SCAN step: (keys, next_cursor)."""
        ...

    def keys_by_pattern(self, pattern: str) -> list[str]:
        ...

    def key_type(self, key: str) -> str:
        ...

    def ttl(self, key: str) -> str:
        """Time-to-live as display text. "No expiry" must read differently from a duration."""
        ...

    def get(self, key: str) -> str:
        ...

    def list_range(self, key: str, start: int, stop: int) -> list[str]:
        ...

    def set_members(self, key: str) -> list[str]:
        ...

    def ranked_range_with_scores(self, key: str, start: int, stop: int) -> list[RankedMember]:
        ...

    def hash_field_names(self, key: str) -> list[str]:
        ...

    def hash_field_get(self, key: str, field: str) -> str:
        ...

    def execute(self, command_text: str) -> str:
        """Run an ad-hoc command and return its reply formatted for display."""
        ...

    def server_status_text(self) -> str:
        ...


def validate_store_client(client) -> None:
    """Validate that an object implements the StoreClient protocol.

    Raises:
        TypeError: If a required method is missing or not callable
    """
    required_methods = [
        "scan",
        "keys_by_pattern",
        "key_type",
        "ttl",
        "get",
        "list_range",
        "set_members",
        "ranked_range_with_scores",
        "hash_field_names",
        "hash_field_get",
        "execute",
        "server_status_text",
    ]

    for method_name in required_methods:
        method = getattr(client, method_name, None)
        if method is None:
            raise TypeError(
                f"{type(client).__name__} does not implement StoreClient: "
                f"missing method '{method_name}()'"
            )
        if not callable(method):
            raise TypeError(
                f"{type(client).__name__} does not implement StoreClient: "
                f"'{method_name}' exists but is not callable"
            )
