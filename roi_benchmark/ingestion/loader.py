"""Main campaign ingestion pipeline."""

from pathlib import Path
from typing import Any

import polars as pl

from ..exceptions import ColumnMappingError
from ..logging_config import get_logger
from ..policy import load_registry
from .cleaner import apply_cleaning
from .enricher import OPTIONAL_COLUMNS, enrich
from .validator import validate_dataframe

logger = get_logger(__name__)

REQUIRED_SCHEMA: dict[str, pl.DataType] = {
    "business_id": pl.Int64,
    "ad_method_id": pl.Int64,
    "amount_spent": pl.Float64,
    "amount_earned": pl.Float64,
    "start_date": pl.Date,
    "end_date": pl.Date,
}


class CampaignIngestionPipeline:
    """Pipeline for loading, cleaning, validating, and enriching campaign data.

    Usage:
        pipeline = CampaignIngestionPipeline()
        df = pipeline.ingest(Path("exports/campaigns.csv"))
        df = pipeline.ingest_records(api_payload)
    """

    def __init__(self, registry_path: Path | None = None):
        self.registry = load_registry(registry_path)
        self.schema: dict[str, Any] = self.registry["campaigns"]

    def ingest(self, file_path: Path, validate: bool = True) -> pl.DataFrame:
        """Full pipeline from a file: Load -> Rename -> Clean -> Enrich -> Validate.

        Args:
            file_path: Path to CSV, Excel or JSON file
            validate: Whether to run Pydantic validation (default: True)

        Returns:
            Cleaned and enriched Polars DataFrame
        """
        df = self._load(file_path)
        logger.info("campaign_file_loaded", path=str(file_path), rows=len(df))
        return self._process(df, validate)

    def ingest_records(
        self, records: list[dict[str, Any]], validate: bool = True
    ) -> pl.DataFrame:
        """Full pipeline from API payload records (camelCase keys).

        An empty payload yields an empty, correctly typed frame.
        """
        if not records:
            return self.empty_frame()

        df = pl.DataFrame(records, infer_schema_length=None, strict=False)
        return self._process(df, validate)

    def empty_frame(self) -> pl.DataFrame:
        """Cleaned-and-enriched frame with zero rows."""
        return enrich(pl.DataFrame(schema={**REQUIRED_SCHEMA, **OPTIONAL_COLUMNS}))

    def _process(self, df: pl.DataFrame, validate: bool) -> pl.DataFrame:
        df = self._rename_columns(df)
        df = self._clean(df)
        df = enrich(df)

        if validate:
            validate_dataframe(df)

        return df

    def _load(self, path: Path) -> pl.DataFrame:
        """Load data from CSV, Excel or JSON."""
        suffix = path.suffix.lower()
        if suffix in (".xlsx", ".xls"):
            return pl.read_excel(path)
        elif suffix == ".csv":
            return pl.read_csv(path, infer_schema_length=None)
        elif suffix == ".json":
            return pl.read_json(path, infer_schema_length=None)
        else:
            raise ValueError(f"Unsupported file type: {suffix}")

    def _rename_columns(self, df: pl.DataFrame) -> pl.DataFrame:
        """Rename columns from raw names to internal names.

        column_map: {internal_name: raw_column_name}, all required.
        optional_column_map: same shape, renamed only when present.
        Columns already carrying the internal name are accepted as-is.
        """
        column_map: dict[str, str] = self.schema["column_map"]
        optional_map: dict[str, str] = self.schema.get("optional_column_map", {})
        nullable = set(self.schema.get("nullable_columns", []))

        available = set(df.columns)
        missing = [
            raw
            for internal, raw in column_map.items()
            if raw not in available and internal not in available and internal not in nullable
        ]
        if missing:
            raise ColumnMappingError(missing, list(available))

        rename_dict = {
            raw: internal
            for internal, raw in {**column_map, **optional_map}.items()
            if raw in available and raw != internal and internal not in available
        }
        df = df.rename(rename_dict)

        # Nullable fields may be left out of a payload entirely
        absent = [col for col in nullable if col not in df.columns]
        if absent:
            df = df.with_columns(
                [pl.lit(None, dtype=REQUIRED_SCHEMA[col]).alias(col) for col in sorted(absent)]
            )
        return df

    def _clean(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply cleaning transformations based on schema."""
        return apply_cleaning(
            df,
            currency_cols=self.schema.get("currency_columns", []),
            date_cols=self.schema.get("date_only_columns", []),
            integer_cols=self.schema.get("integer_columns", []),
            float_cols=self.schema.get("float_columns", []),
            string_cols=self.schema.get("string_columns", []),
        )
