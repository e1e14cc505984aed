"""Append-only record of failures, keyed by command name."""

from __future__ import annotations

from collections.abc import Iterator


class ErrorLog:
    """Command name -> list of failure messages, in insertion order.

    Chains append from the single event-loop thread, so no lock is taken.
    """

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, command_name: str, message: str) -> None:
        self._errors.setdefault(command_name, []).append(message)

    def get(self, command_name: str) -> list[str]:
        """Messages recorded for one command (empty list if none)."""
        return list(self._errors.get(command_name, ()))

    def items(self) -> Iterator[tuple[str, list[str]]]:
        for name, errors in self._errors.items():
            yield name, list(errors)

    def __len__(self) -> int:
        return sum(len(errors) for errors in self._errors.values())

    def __bool__(self) -> bool:
        return bool(self._errors)
