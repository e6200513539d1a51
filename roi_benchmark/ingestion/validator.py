"""Row-level validation of cleaned campaign records."""

from typing import Any

import polars as pl
from pydantic import ValidationError

from ..exceptions import DataValidationError
from ..models.campaign import CampaignRecord


def validate_dataframe(df: pl.DataFrame) -> None:
    """Validate each row against the CampaignRecord model.

    Catches what cleaning cannot fix: unparseable ids or dates (nulled by
    the non-strict casts), negative spend and flights that end before they
    start.

    Raises:
        DataValidationError: If any rows fail validation
    """
    errors: list[dict[str, Any]] = []
    rows = df.to_dicts()

    for i, row in enumerate(rows):
        try:
            CampaignRecord.model_validate(row)
        except ValidationError as e:
            errors.append({"row": i, "errors": e.errors()})

    if errors:
        raise DataValidationError(errors, len(rows))

