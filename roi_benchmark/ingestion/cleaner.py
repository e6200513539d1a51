"""Polars cleaning expressions for raw campaign exports and API payloads."""

import polars as pl

# Date layouts seen in campaign exports, tried in order
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


def _numeric_text(col_name: str) -> pl.Expr:
    """Text form of a numeric column with separators and '$' removed.

    Blank strings become null so that non-strict casts yield null.
    """
    return (
        pl.col(col_name)
        .cast(pl.Utf8)
        .str.replace_all(",", "", literal=True)
        .str.replace_all("$", "", literal=True)
        .str.strip_chars()
        .replace("", None)
    )


def clean_decimal_column(col_name: str, dtype: pl.DataType = pl.Utf8) -> pl.Expr:
    """Money amounts and coordinates: "1,250.00" / "$400" / 40.71 -> Float64.

    Unparseable values become null and are caught by row validation.
    """
    if dtype.is_numeric():
        return pl.col(col_name).cast(pl.Float64).alias(col_name)
    return _numeric_text(col_name).cast(pl.Float64, strict=False).alias(col_name)


def clean_integer_column(col_name: str) -> pl.Expr:
    """Ids: "7" / "7.0" / 7 -> Int64."""
    return (
        _numeric_text(col_name)
        .cast(pl.Float64, strict=False)
        .cast(pl.Int64, strict=False)
        .alias(col_name)
    )


def clean_date_column(col_name: str, dtype: pl.DataType) -> pl.Expr:
    """Convert to date.

    Handles:
    - Already parsed Date/Datetime (Excel, JSON with typed dates)
    - ISO strings, date-only or full timestamps ('2024-03-01T00:00:00.000Z')
    - US spreadsheet dates ('03/01/2024')
    """
    col = pl.col(col_name)

    if dtype == pl.Date:
        return col.alias(col_name)
    if dtype.base_type() == pl.Datetime:
        return col.dt.date().alias(col_name)

    text = col.cast(pl.Utf8).str.strip_chars().str.slice(0, 10)
    return pl.coalesce(
        [text.str.to_date(fmt, strict=False) for fmt in DATE_FORMATS]
    ).alias(col_name)


def clean_string_column(col_name: str) -> pl.Expr:
    """Strip whitespace and normalize empty strings to null."""
    return (
        pl.col(col_name)
        .cast(pl.Utf8)
        .str.strip_chars()
        .replace("", None)
        .alias(col_name)
    )


def apply_cleaning(
    df: pl.DataFrame,
    currency_cols: list[str],
    date_cols: list[str],
    integer_cols: list[str],
    float_cols: list[str] | None = None,
    string_cols: list[str] | None = None,
) -> pl.DataFrame:
    """Apply all cleaning transformations to DataFrame.

    Only cleans columns that exist in the DataFrame; everything else is
    left untouched.
    """
    schema = df.schema
    exprs: list[pl.Expr] = []

    for col in [*currency_cols, *(float_cols or [])]:
        if col in schema:
            exprs.append(clean_decimal_column(col, schema[col]))

    for col in date_cols:
        if col in schema:
            exprs.append(clean_date_column(col, schema[col]))

    for col in integer_cols:
        if col in schema:
            exprs.append(clean_integer_column(col))

    for col in string_cols or []:
        if col in schema:
            exprs.append(clean_string_column(col))

    return df.with_columns(exprs) if exprs else df
