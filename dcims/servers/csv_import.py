"""
CSV import of server records.

Expected layout: a header row of lowercase snake_case column names, then one
server per row. ``hostname``, ``dc_site`` and ``device_type`` are required
columns; a file without them is rejected as a whole. Every data row is then
validated on its own, including lines with too many fields, and failures are
collected as ``"Row N: ..."`` messages while the valid rows go through.
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Optional, Set, Tuple

import pandas as pd

from dcims.core.exceptions import ValidationError
from .enums import ENUM_FIELDS, canonical_enum_value
from .schemas import WRITABLE_COLUMNS, check_ip

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: Tuple[str, ...] = ("hostname", "dc_site", "device_type")
OPTIONAL_COLUMNS: Set[str] = set(WRITABLE_COLUMNS) - set(REQUIRED_COLUMNS)
IP_COLUMNS = ("ip_address", "ip_oob")
DATE_FORMAT = "%Y-%m-%d"


# Left in place of a line with too many fields so later rows keep their numbers.
OVERFLOW_MARKER = "\x00overflow"


def parse_servers_csv(file_bytes: bytes) -> Tuple[pd.DataFrame, Dict[int, str]]:
    """
    Read the upload as text columns (no NaN coercion) with normalized
    headers.

    Returns the frame, indexed by 1-based data row number, plus a
    {row number: problem} map of lines carrying more fields than the
    header; those lines are left out of the frame. Raises ValidationError
    for unreadable files or missing required columns.
    """
    if not file_bytes or not file_bytes.strip():
        raise ValidationError("Uploaded file is empty.")

    overflow: List[int] = []

    def hold_long_line(fields: List[str]) -> List[str]:
        overflow.append(len(fields))
        return [OVERFLOW_MARKER]

    try:
        raw = pd.read_csv(
            BytesIO(file_bytes),
            header=None,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            engine="python",
            on_bad_lines=hold_long_line,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Could not parse file: {exc}")

    width = raw.shape[1]
    df = raw.iloc[1:].copy()
    df.columns = [str(c).strip().lower() for c in raw.iloc[0]]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValidationError(f"Missing required columns: {', '.join(missing)}")

    held = (df.iloc[:, 0] == OVERFLOW_MARKER).to_numpy()
    rejected = {
        int(row): f"Expected {width} fields, found {found}"
        for row, found in zip(df.index[held], overflow)
    }
    df = df[~held]

    unknown = [c for c in df.columns if c not in REQUIRED_COLUMNS and c not in OPTIONAL_COLUMNS]
    if unknown:
        logger.info("CSV import ignoring unknown columns: %s", ", ".join(unknown))
        df = df.drop(columns=unknown)

    return df, rejected


def validate_row(raw: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], List[str]]:
    """
    Validate one CSV row.

    Returns (clean_record, []) when valid, (None, messages) otherwise. Blank
    cells become None; enum values are matched case-insensitively and
    stored in their canonical spelling.
    """
    record: Dict[str, Any] = {}
    for key, value in raw.items():
        if isinstance(value, str):
            record[key] = value.strip() or None
        else:
            # short rows come back as NaN
            record[key] = None if pd.isna(value) else value

    problems: List[str] = []

    missing = [c for c in REQUIRED_COLUMNS if not record.get(c)]
    if missing:
        label = "field" if len(missing) == 1 else "fields"
        problems.append(f"Missing required {label}: {', '.join(missing)}")

    for field in ENUM_FIELDS:
        value = record.get(field)
        if value is None:
            continue
        canonical, error = canonical_enum_value(field, value)
        if error:
            problems.append(error)
        else:
            record[field] = canonical

    for field in IP_COLUMNS:
        value = record.get(field)
        if value is None:
            continue
        try:
            record[field] = check_ip(value)
        except ValueError:
            problems.append(f"Invalid {field} '{value}'")

    warranty = record.get("warranty")
    if warranty is not None:
        try:
            record["warranty"] = datetime.strptime(warranty, DATE_FORMAT).date()
        except ValueError:
            problems.append(f"Invalid warranty '{warranty}'. Expected YYYY-MM-DD")

    if problems:
        return None, problems
    return record, []


def validate_rows(
    df: pd.DataFrame,
    rejected: Optional[Dict[int, str]] = None,
) -> Tuple[List[Dict[str, Any]], List[str]]:
    """
    Validate every row independently. Row numbers come from the frame's
    index (1-based data rows, the header is not counted); ``rejected``
    holds rows the parser already turned away and is merged in row order.
    """
    valid: List[Dict[str, Any]] = []
    problems_by_row: Dict[int, List[str]] = {
        row: [problem] for row, problem in (rejected or {}).items()
    }

    for row, raw in zip(df.index, df.to_dict(orient="records")):
        record, problems = validate_row(raw)
        if problems:
            problems_by_row[int(row)] = problems
        else:
            valid.append(record)

    errors = [f"Row {row}: {'; '.join(problems)}" for row, problems in sorted(problems_by_row.items())]
    logger.info("CSV validation: %d valid row(s), %d rejected", len(valid), len(errors))
    return valid, errors
