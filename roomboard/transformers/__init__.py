"""Data transformation package."""

from roomboard.transformers.document_transformer import DocumentTransformer
from roomboard.transformers.row_transformer import RowTransformer

__all__ = [
    "DocumentTransformer",
    "RowTransformer",
]
