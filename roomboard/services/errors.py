"""Booking errors raised before any state change."""


class BookingError(Exception):
    """Base exception for rejected booking operations."""

    pass


class RoomNotFoundError(BookingError):
    """Raised when a room id is not in the registry."""

    pass


class RoomOccupiedError(BookingError):
    """Raised when checking in a room that is already occupied."""

    pass


class RoomNotOccupiedError(BookingError):
    """Raised when checking out or charging a room that is available."""

    pass


class InvalidBookingError(BookingError):
    """Raised when guest name, price or amount fail validation."""

    pass
