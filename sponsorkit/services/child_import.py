"""
Spreadsheet import: maps exported sheet rows onto the child-create payload and
creates children one row at a time.

Rows arrive either as a CSV upload or as JSON objects the dashboard already
read from an Excel sheet. Each row gets its own session and commit, so one bad
row never undoes the others.
"""
from __future__ import annotations
import csv
import io
import logging
from datetime import date, timedelta
from typing import Any, Iterable, Mapping

from sqlalchemy import func, select

from sponsorkit.models import School
from sponsorkit.services.child_service import create_child
from sponsorkit.utils.db import get_session
from sponsorkit.utils.errors import ApiError, ValidationError
from sponsorkit.utils.validation import clean_str

logger = logging.getLogger(__name__)

MAX_ROWS = 2000

# day 0 of the spreadsheet serial date system (1900 leap-year bug included)
EXCEL_EPOCH = date(1899, 12, 30)

# payload key -> accepted column headers, first match wins
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "firstName": ("First Name", "firstName"),
    "lastName": ("Last Name", "lastName"),
    "dateOfBirth": ("Date of Birth", "dateOfBirth"),
    "gender": ("Gender", "gender"),
    "schoolName": ("School", "school", "schoolName"),
    "class": ("Class", "class"),
    "fatherFullName": ("Father Name", "fatherFullName"),
    "fatherAddress": ("Father Address", "fatherAddress"),
    "fatherContact": ("Father Contact", "fatherContact"),
    "motherFullName": ("Mother Name", "motherFullName"),
    "motherAddress": ("Mother Address", "motherAddress"),
    "motherContact": ("Mother Contact", "motherContact"),
    "story": ("Story", "story"),
    "comment": ("Comment", "comment"),
}


def map_row(row: Mapping[str, Any]) -> dict:
    out: dict[str, Any] = {}
    for key, headers in COLUMN_ALIASES.items():
        value = None
        for header in headers:
            value = clean_str(row.get(header))
            if value:
                break
        out[key] = value
    out["dateOfBirth"] = excel_serial_to_date(out["dateOfBirth"])
    return out


def excel_serial_to_date(value: str | None) -> str | None:
    """Sheets read without date parsing hand dates over as serial day numbers."""
    if value is None:
        return None
    try:
        serial = float(value)
    except ValueError:
        return value
    if not 0 < serial < 2958466:
        return value
    return (EXCEL_EPOCH + timedelta(days=int(serial))).isoformat()


def read_csv(text: str) -> list[dict]:
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    return [dict(r) for r in reader]


def _school_id_by_name(s, name: str | None) -> int:
    if not name:
        raise ValidationError("School is required")
    school = s.execute(
        select(School).where(func.lower(School.name) == name.strip().lower()).limit(1)
    ).scalar_one_or_none()
    if school is None:
        raise ValidationError(f"School not found: {name}")
    return school.id


def import_rows(rows: Iterable[Mapping[str, Any]]) -> dict:
    """
    Create one child per row.

    Returns ``{"created": n, "failed": [{"row": i, "error": msg}]}`` where
    ``row`` is 1-based.
    """
    rows = list(rows)
    if not rows:
        raise ValidationError("No rows to import")
    if len(rows) > MAX_ROWS:
        raise ValidationError(f"Too many rows (maximum {MAX_ROWS})")

    created = 0
    failed: list[dict] = []
    for index, raw in enumerate(rows, start=1):
        if not isinstance(raw, Mapping):
            failed.append({"row": index, "error": "Row must be an object"})
            continue
        payload = map_row(raw)
        try:
            with get_session() as s:
                payload["schoolId"] = _school_id_by_name(s, payload.pop("schoolName"))
                create_child(s, payload)
                s.commit()
            created += 1
        except ApiError as e:
            failed.append({"row": index, "error": e.message})
    logger.info("import finished: created=%d failed=%d", created, len(failed))
    return {"created": created, "failed": failed}
