"""Core type definitions."""

from enum import StrEnum
from typing import NewType

# Page route (e.g., "/", "/about", "/@header")
# Exact-match lookup key, never normalized by the core
Route = NewType("Route", str)


class FetchStatus(StrEnum):
    """Lifecycle of one entity cache entry."""

    ABSENT = "absent"
    PENDING = "pending"
    READY = "ready"
