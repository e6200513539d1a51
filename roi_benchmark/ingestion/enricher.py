"""Data enrichment functions - add derived columns."""

import polars as pl

OPTIONAL_COLUMNS: dict[str, pl.DataType] = {
    "campaign_id": pl.Int64,
    "name": pl.Utf8,
    "business_name": pl.Utf8,
    "business_type": pl.Utf8,
    "latitude": pl.Float64,
    "longitude": pl.Float64,
}


def add_missing_optional_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Add typed null columns for optional fields the source did not carry."""
    exprs = [
        pl.lit(None, dtype=dtype).alias(col)
        for col, dtype in OPTIONAL_COLUMNS.items()
        if col not in df.columns
    ]
    return df.with_columns(exprs) if exprs else df


def enrich(df: pl.DataFrame) -> pl.DataFrame:
    """Apply all enrichment transformations."""
    df = add_missing_optional_columns(df)
    return df
