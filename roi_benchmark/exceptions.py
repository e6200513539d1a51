"""Exceptions raised while loading campaign data and registry configuration."""

from typing import Any


class IngestionError(Exception):
    """Base exception for ingestion errors."""

    pass


class RegistryLoadError(IngestionError):
    """benchmark_registry.yaml is missing, unreadable or lacks a section."""

    pass


class DataValidationError(IngestionError):
    """Campaign rows failed CampaignRecord validation.

    `errors` holds one {"row": index, "errors": [...]} entry per failing row.
    """

    def __init__(self, errors: list[dict[str, Any]], row_count: int):
        self.errors = errors
        self.row_count = row_count
        rows = [e["row"] for e in errors[:5]]
        super().__init__(
            f"{len(errors)} of {row_count} campaign rows are invalid "
            f"(rows {rows}{'...' if len(errors) > 5 else ''}). "
            f"First error: {errors[0]['errors'] if errors else 'N/A'}"
        )


class ColumnMappingError(IngestionError):
    """A column the registry marks as required is absent from the source."""

    def __init__(self, missing_columns: list[str], available_columns: list[str]):
        self.missing_columns = missing_columns
        self.available_columns = available_columns
        super().__init__(
            f"Campaign data is missing {missing_columns}; "
            f"got {sorted(available_columns)[:10]}"
        )
