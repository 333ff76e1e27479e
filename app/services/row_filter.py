"""Row filtering: separate real data rows from template scaffolding."""

import logging

from app.schemas.upload import RawRow
from app.services.normalizer import FIELD_ALIASES, REQUIRED_FIELDS, normalize_text_fields

logger = logging.getLogger(__name__)

# Case-sensitive markers left behind by the import template
NOISE_MARKERS = (
    "REQUIRED",
    "Full student name",
    "John Doe",
    "e.g.",
)


def noise_reason(row: RawRow) -> str | None:
    """Why a row is not data, or None when it is a data row. Never raises."""
    fields = normalize_text_fields(row)
    for key in REQUIRED_FIELDS:
        value = fields[key]
        if not value:
            return f"missing {key}"
        for marker in NOISE_MARKERS:
            if marker in value:
                return f"{key} contains template text '{marker}'"
        if value in FIELD_ALIASES[key]:
            return "header row"
    return None


def is_data_row(row: RawRow) -> bool:
    return noise_reason(row) is None


def filter_data_rows(
    rows: list[RawRow],
    first_row_number: int = 2,
) -> list[tuple[int, RawRow]]:
    """Keep data rows in order, paired with their spreadsheet row numbers."""
    data_rows = []
    for row_num, row in enumerate(rows, start=first_row_number):
        reason = noise_reason(row)
        if reason:
            logger.debug(f"[ROW FILTER] Row {row_num} skipped: {reason}")
            continue
        data_rows.append((row_num, row))
    logger.info(f"[ROW FILTER] {len(data_rows)} data rows of {len(rows)} decoded rows")
    return data_rows
