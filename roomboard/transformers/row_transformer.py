"""Transformer between backend table rows and board models.

Rows use the underscore column names of the rooms, history and
transactions tables; these are the model field names, so the projection is
a plain dump/validate in both directions.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from structlog import get_logger

from roomboard.models import HistoryRecord, Room, Transaction

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RowTransformer:
    """Maps remote rows to models and back."""

    @staticmethod
    def _parse_rows(
        rows: list[dict[str, Any]],
        model: type[ModelT],
        table: str,
    ) -> list[ModelT]:
        """Validate rows, skipping any that fail.

        Args:
            rows: Rows as returned by the backend
            model: Target model class
            table: Table name for logging

        Returns:
            Validated models in row order
        """
        parsed: list[ModelT] = []
        failed_count = 0

        for row in rows:
            try:
                parsed.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "Failed to transform row",
                    table=table,
                    row=str(row)[:100],  # Truncate for logging
                    error=str(e),
                )
                failed_count += 1

        if failed_count:
            logger.warning(
                "Rows skipped during transformation",
                table=table,
                total_rows=len(rows),
                failed=failed_count,
            )
        return parsed

    @staticmethod
    def rooms_from_rows(rows: list[dict[str, Any]]) -> list[Room]:
        return RowTransformer._parse_rows(rows, Room, "rooms")

    @staticmethod
    def history_from_rows(rows: list[dict[str, Any]]) -> list[HistoryRecord]:
        return RowTransformer._parse_rows(rows, HistoryRecord, "history")

    @staticmethod
    def transactions_from_rows(rows: list[dict[str, Any]]) -> list[Transaction]:
        return RowTransformer._parse_rows(rows, Transaction, "transactions")

    @staticmethod
    def room_to_row(room: Room) -> dict[str, Any]:
        """Room as a rooms table row (ISO timestamps, enum values)."""
        return room.model_dump(mode="json")

    @staticmethod
    def history_to_row(record: HistoryRecord) -> dict[str, Any]:
        return record.model_dump(mode="json")

    @staticmethod
    def transaction_to_row(transaction: Transaction) -> dict[str, Any]:
        return transaction.model_dump(mode="json")
