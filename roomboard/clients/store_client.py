"""Client for the hosted booking backend (PostgREST-style HTTP API)."""

import asyncio
from datetime import date
from typing import Any, Optional

import httpx
from structlog import get_logger

from roomboard.config import settings

logger = get_logger(__name__)


class StoreClientError(Exception):
    """Base exception for backend client errors."""

    pass


class StoreAuthenticationError(StoreClientError):
    """Raised when the backend rejects the API key."""

    pass


class StoreNotFoundError(StoreClientError):
    """Raised when a table or function does not exist."""

    pass


class StoreServerError(StoreClientError):
    """Raised when the backend returns a server error."""

    pass


class BookingStoreClient:
    """Client for the rooms, history and transactions tables."""

    def __init__(self):
        """Initialize the backend client with settings."""
        self.base_url = settings.backend.url.rstrip("/")
        self.api_key = settings.backend.api_key
        self.timeout = settings.backend.request_timeout
        self.max_retries = settings.backend.max_retries
        self.retry_backoff_base = 2  # Exponential backoff base

    def _get_headers(self, prefer: Optional[str] = None) -> dict[str, str]:
        """Get default headers for backend requests.

        Args:
            prefer: Optional PostgREST Prefer header value

        Returns:
            Dictionary of HTTP headers including the API key.
        """
        headers = {
            "Content-Type": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": "RoomBoard/1.0",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
        prefer: Optional[str] = None,
    ) -> Any:
        """Make an HTTP request to the backend with retry logic.

        Args:
            method: HTTP method (GET, POST, PATCH, etc.)
            endpoint: Path below the base URL, e.g. "/rooms"
            data: Request body (row, list of rows or RPC arguments)
            params: Query parameters (PostgREST filters)
            prefer: Optional Prefer header value

        Returns:
            Decoded JSON body, or an empty list for empty responses

        Raises:
            StoreAuthenticationError: If authentication fails
            StoreNotFoundError: If table or function not found
            StoreServerError: If server error persists after retries
            StoreClientError: For other errors
        """
        url = f"{self.base_url}{endpoint}"
        headers = self._get_headers(prefer)

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=headers,
                        json=data,
                        params=params,
                    )

                    if response.status_code in (401, 403):
                        logger.error(
                            "Backend authentication failed",
                            endpoint=endpoint,
                            status_code=response.status_code,
                        )
                        raise StoreAuthenticationError(
                            f"Authentication failed for {endpoint}: Check API key"
                        )

                    if response.status_code == 404:
                        logger.warning(
                            "Backend resource not found",
                            endpoint=endpoint,
                            status_code=response.status_code,
                        )
                        raise StoreNotFoundError(f"Resource not found: {endpoint}")

                    # Handle server errors with retry
                    if response.status_code >= 500:
                        if attempt < self.max_retries - 1:
                            wait_time = self.retry_backoff_base ** attempt
                            logger.warning(
                                "Backend server error, retrying",
                                endpoint=endpoint,
                                status_code=response.status_code,
                                attempt=attempt + 1,
                                max_retries=self.max_retries,
                                wait_seconds=wait_time,
                            )
                            await asyncio.sleep(wait_time)
                            continue
                        logger.error(
                            "Backend server error, max retries exceeded",
                            endpoint=endpoint,
                            status_code=response.status_code,
                        )
                        raise StoreServerError(
                            f"Server error at {endpoint}: {response.text}"
                        )

                    if 400 <= response.status_code < 500:
                        logger.error(
                            "Backend client error",
                            endpoint=endpoint,
                            status_code=response.status_code,
                            response_text=response.text[:200],  # Limit error text
                        )
                        raise StoreClientError(
                            f"Client error at {endpoint}: {response.text}"
                        )

                    if response.status_code in (200, 201, 204):
                        logger.debug(
                            "Backend request successful",
                            endpoint=endpoint,
                            method=method,
                            status_code=response.status_code,
                        )
                        if response.status_code != 204 and response.text:
                            return response.json()
                        return []

                    logger.error(
                        "Unexpected backend response status",
                        endpoint=endpoint,
                        status_code=response.status_code,
                    )
                    raise StoreClientError(
                        f"Unexpected response from {endpoint}: {response.status_code}"
                    )

            except httpx.TimeoutException as e:
                if attempt < self.max_retries - 1:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Backend request timeout, retrying",
                        endpoint=endpoint,
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error("Backend request timeout, max retries exceeded", endpoint=endpoint)
                raise StoreClientError(f"Request timeout for {endpoint}") from e

            except httpx.RequestError as e:
                if attempt < self.max_retries - 1:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Backend request error, retrying",
                        endpoint=endpoint,
                        error=str(e),
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(
                    "Backend request error, max retries exceeded",
                    endpoint=endpoint,
                    error=str(e),
                )
                raise StoreClientError(f"Request failed for {endpoint}: {str(e)}") from e

        raise StoreClientError(f"Failed to complete request to {endpoint}")

    async def get_rooms(self) -> list[dict[str, Any]]:
        """Fetch all room rows ordered by id."""
        rows = await self._make_request("GET", "/rooms", params={"select": "*", "order": "id.asc"})
        logger.debug("Fetched rooms", room_count=len(rows))
        return rows

    async def upsert_rooms(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert or update room rows, merging on the primary key.

        Args:
            rows: Room rows with underscore column names

        Returns:
            Rows as stored by the backend
        """
        return await self._make_request(
            "POST",
            "/rooms",
            data=rows,
            prefer="resolution=merge-duplicates,return=representation",
        )

    async def get_history(self) -> list[dict[str, Any]]:
        """Fetch history rows newest-first."""
        rows = await self._make_request(
            "GET", "/history", params={"select": "*", "order": "check_out_time.desc"}
        )
        logger.debug("Fetched history", record_count=len(rows))
        return rows

    async def check_out_room(self, room_id: str, history_row: dict[str, Any]) -> Any:
        """Reset a room and insert its history row in one database transaction.

        Calls the check_out_room function shipped in sql/schema.sql.

        Args:
            room_id: Room being checked out
            history_row: History row to insert

        Returns:
            Function result as returned by the backend
        """
        logger.info("Checking out room", room_id=room_id, history_id=history_row.get("id"))
        return await self._make_request(
            "POST",
            "/rpc/check_out_room",
            data={"p_room_id": room_id, "p_record": history_row},
        )

    async def check_in_room(
        self,
        room_row: dict[str, Any],
        transaction_row: dict[str, Any],
    ) -> Any:
        """Store an occupied room and its ledger row in one database transaction.

        Calls the check_in_room function shipped in sql/schema.sql.

        Args:
            room_row: Room row after check-in
            transaction_row: Opening ledger row (client-assigned id)

        Returns:
            Function result as returned by the backend
        """
        logger.info(
            "Checking in room",
            room_id=room_row.get("id"),
            transaction_id=transaction_row.get("id"),
        )
        return await self._make_request(
            "POST",
            "/rpc/check_in_room",
            data={"p_room": room_row, "p_transaction": transaction_row},
        )

    async def insert_transaction(self, row: dict[str, Any]) -> Any:
        """Append a ledger row.

        The row carries a client-assigned id and duplicates are ignored, so
        a retry after a lost response does not add a second entry.
        """
        return await self._make_request(
            "POST",
            "/transactions",
            data=row,
            params={"on_conflict": "id"},
            prefer="resolution=ignore-duplicates,return=minimal",
        )

    async def get_transactions(self, payment_date: date) -> list[dict[str, Any]]:
        """Fetch ledger rows for one payment date, in insertion order.

        Args:
            payment_date: Local calendar date the payments were recorded on

        Returns:
            Transaction rows
        """
        logger.info("Fetching transactions", payment_date=payment_date.isoformat())
        rows = await self._make_request(
            "GET",
            "/transactions",
            params={
                "select": "*",
                "payment_date": f"eq.{payment_date.isoformat()}",
            },
        )
        logger.info(
            "Successfully fetched transactions",
            payment_date=payment_date.isoformat(),
            transaction_count=len(rows),
        )
        return rows
