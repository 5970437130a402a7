"""Static allow-list of URL schemes, hosts and ports the embedded view may reach."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AllowListConfig:
    """Immutable allow-list.

    Hosts and schemes are compared case-insensitively, so they are stored
    lower-case. ``ports`` keeps its declaration order for user-facing messages.
    """

    schemes: frozenset[str] = frozenset({"http", "https"})
    hosts: frozenset[str] = frozenset({"localhost", "127.0.0.1", "0.0.0.0"})  # nosec B104
    ports: tuple[int, ...] = (3000, 8000, 8080, 3001, 5000)

    def __post_init__(self) -> None:
        object.__setattr__(self, "schemes", frozenset(s.lower() for s in self.schemes))
        object.__setattr__(self, "hosts", frozenset(h.lower() for h in self.hosts))
        object.__setattr__(self, "ports", tuple(self.ports))


DEFAULT_ALLOW_LIST = AllowListConfig()
