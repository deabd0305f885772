"""Persistence backends package."""

from roomboard.stores.base import BookingStore
from roomboard.stores.local_store import LocalStore
from roomboard.stores.remote_store import RemoteStore

__all__ = [
    "BookingStore",
    "LocalStore",
    "RemoteStore",
]
