"""
Spreadsheet ingestion for exported governor snapshots.

The game client export tools name their columns loosely ("Governor ID",
"Character ID", "T5 Dead", ...). This module reads the first worksheet of an
upload, resolves the header row to a FieldMap once, and walks the data rows
into canonical SnapshotRecord values.

Per-row problems never raise: missing identifiers skip the row and malformed
numbers read as 0. Only an unreadable or empty file raises ParseError.
"""

import csv
import io
from pathlib import PurePath
from typing import Any, List, Optional, Sequence

from openpyxl import load_workbook

from tracker.config import Config
from tracker.constants import FieldAliases, SUPPORTED_UPLOAD_EXTENSIONS
from tracker.data_models.snapshot import FieldMap, SnapshotRecord, NOT_FOUND
from tracker.utils.exceptions import ParseError
from tracker.utils.logger import setup_logger
from tracker.utils.numbers import parse_number

logger = setup_logger(__name__)

DEFAULT_USERNAME = 'N/A'


def read_table(data: bytes, filename: Optional[str] = None) -> List[List[Any]]:
    """
    Read the first worksheet of an upload into a list of rows.

    Args:
        data: Raw file bytes
        filename: Original filename, used to pick the reader by extension

    Returns:
        Rows as lists of cell values; the first row is the header

    Raises:
        ParseError: If the payload is empty, too large or not a readable sheet
    """
    if not data:
        raise ParseError("Uploaded file is empty")
    if len(data) > Config.MAX_UPLOAD_BYTES:
        raise ParseError(
            f"Uploaded file is too large ({len(data):,} bytes, "
            f"maximum {Config.MAX_UPLOAD_BYTES:,})"
        )

    suffix = PurePath(filename).suffix.lower() if filename else '.xlsx'
    if suffix not in SUPPORTED_UPLOAD_EXTENSIONS:
        raise ParseError(
            f"Unsupported file type '{suffix}'. "
            f"Allowed: {', '.join(SUPPORTED_UPLOAD_EXTENSIONS)}"
        )

    if suffix == '.csv':
        return _read_csv(data)
    return _read_workbook(data)


def _read_csv(data: bytes) -> List[List[Any]]:
    try:
        text = data.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise ParseError(f"CSV file is not valid UTF-8: {e}") from e
    return [row for row in csv.reader(io.StringIO(text))]


def _read_workbook(data: bytes) -> List[List[Any]]:
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise ParseError(f"Could not open workbook: {e}") from e

    try:
        if not workbook.worksheets:
            raise ParseError("Workbook has no worksheets")
        sheet = workbook.worksheets[0]
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def find_column_index(headers: Sequence[str], possible_names: Sequence[str]) -> int:
    """
    Find the column for a field given its priority-ordered aliases.

    Exact case-insensitive matches are tried for every alias first; only if
    none matches does a substring pass run. Within a pass the first alias
    wins, then the first header.

    Args:
        headers: Header row as strings (empty string for blank cells)
        possible_names: Aliases in priority order

    Returns:
        Column index, or NOT_FOUND
    """
    lowered = [h.lower() if h else '' for h in headers]

    for name in possible_names:
        target = name.lower()
        for index, header in enumerate(lowered):
            if header == target:
                return index

    for name in possible_names:
        target = name.lower()
        for index, header in enumerate(lowered):
            if header and target in header:
                return index

    return NOT_FOUND


def resolve_fields(headers: Sequence[str]) -> FieldMap:
    """
    Resolve a header row into a FieldMap.

    Falls back to column 0 for the identifier and column 1 for the display
    name when those cannot be matched.
    """
    power = find_column_index(headers, FieldAliases.POWER)
    if power == NOT_FOUND:
        power = find_column_index(headers, FieldAliases.POWER_FALLBACK)

    governor_id = find_column_index(headers, FieldAliases.GOVERNOR_ID)
    if governor_id == NOT_FOUND:
        governor_id = 0

    username = find_column_index(headers, FieldAliases.USERNAME)
    if username == NOT_FOUND and len(headers) > 1:
        username = 1

    return FieldMap(
        governor_id=governor_id,
        username=username,
        kingdom=find_column_index(headers, FieldAliases.KINGDOM),
        power=power,
        t5_deaths=find_column_index(headers, FieldAliases.T5_DEATHS),
        t4_deaths=find_column_index(headers, FieldAliases.T4_DEATHS),
        kill_points=find_column_index(headers, FieldAliases.KILL_POINTS),
        resources=find_column_index(headers, FieldAliases.RESOURCES)
    )


def _cell(row: Sequence[Any], index: int) -> Any:
    if index == NOT_FOUND or index >= len(row):
        return None
    return row[index]


def _cell_text(value: Any) -> str:
    if value is None:
        return ''
    # Numeric ids come back from openpyxl as floats like 12345.0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def extract_records(rows: Sequence[Sequence[Any]], field_map: FieldMap) -> List[SnapshotRecord]:
    """
    Convert data rows into snapshot records using a resolved FieldMap.

    Args:
        rows: Data rows (header row excluded)
        field_map: Column layout from resolve_fields()

    Returns:
        Records in sheet order; rows without an identifier are skipped
    """
    records = []
    skipped = 0

    for row in rows:
        if not row:
            skipped += 1
            continue

        governor_id = _cell_text(_cell(row, field_map.governor_id))
        if not governor_id:
            skipped += 1
            continue

        deaths = (parse_number(_cell(row, field_map.t5_deaths))
                  + parse_number(_cell(row, field_map.t4_deaths)))

        records.append(SnapshotRecord(
            governor_id=governor_id,
            username=_cell_text(_cell(row, field_map.username)) or DEFAULT_USERNAME,
            kingdom=_cell_text(_cell(row, field_map.kingdom)),
            power=parse_number(_cell(row, field_map.power)),
            deaths=deaths,
            kill_points=parse_number(_cell(row, field_map.kill_points)),
            resources=parse_number(_cell(row, field_map.resources))
        ))

    if skipped:
        logger.debug(f"Skipped {skipped} row(s) without a governor id")

    return records


def parse_snapshot_rows(rows: Sequence[Sequence[Any]]) -> List[SnapshotRecord]:
    """
    Parse a full table (header row first) into snapshot records.

    Raises:
        ParseError: If the table has no data rows
    """
    if len(rows) < 2:
        raise ParseError("Spreadsheet is empty")

    headers = [_cell_text(h) for h in rows[0]]
    field_map = resolve_fields(headers)
    logger.debug(f"Resolved columns: {field_map}")

    return extract_records(rows[1:], field_map)


def parse_snapshot_file(data: bytes, filename: Optional[str] = None) -> List[SnapshotRecord]:
    """Read an uploaded spreadsheet and return its snapshot records."""
    return parse_snapshot_rows(read_table(data, filename))
