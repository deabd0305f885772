"""Backend clients package."""

from roomboard.clients.change_feed import RoomChangeFeed
from roomboard.clients.store_client import (
    BookingStoreClient,
    StoreAuthenticationError,
    StoreClientError,
    StoreNotFoundError,
    StoreServerError,
)

__all__ = [
    "BookingStoreClient",
    "StoreClientError",
    "StoreAuthenticationError",
    "StoreNotFoundError",
    "StoreServerError",
    "RoomChangeFeed",
]
