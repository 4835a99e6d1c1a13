"""Persistence layer: store contracts and their memory/SQL implementations."""

from .base import ApplicationStore, JobStore, MatchStore, Stores, UserStore
from .memory import create_memory_stores

__all__ = [
    "ApplicationStore",
    "JobStore",
    "MatchStore",
    "Stores",
    "UserStore",
    "create_memory_stores",
]
