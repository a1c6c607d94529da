# Bulk onboarding of students and alumni from a CSV export.
# Each row is validated on its own; a bad row is reported and skipped.

import csv
import io
import re
import logging
from typing import Dict, Optional

from pydantic import EmailStr, Field, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from alnet.core.config import settings
from alnet.core.security import generate_strong_password
from alnet.modules.profiles.schemas.profile import BulkUploadError, BulkUploadResult, ProfileType, ProfileUpdate
from alnet.modules.profiles.services.profile import build_profile, get_profile_by_user_id, update_profile
from alnet.modules.user_management.services.user import create_user, get_user_by_email

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
# Columns that hold lists use ";" or "|" inside a cell, commas also work when quoted
_LIST_SEPARATOR = re.compile(r"[;|,]")
_LIST_COLUMNS = ("skills", "mentorship_topics")


class InvalidUploadFile(Exception):
    """The uploaded file cannot be processed at all"""


class BulkUserRow(ProfileUpdate):
    email: EmailStr = Field(..., max_length=255)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: ProfileType = ProfileType.ALUMNI


def _normalize_header(name: str) -> str:
    name = re.sub(r"[\s\-]+", "_", (name or "").strip())
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _row_payload(row: Dict[str, Optional[str]], default_role: ProfileType) -> dict:
    payload = {}
    for key, value in row.items():
        if key is None or value is None:
            continue
        value = value.strip()
        if value == "":
            continue
        if key in _LIST_COLUMNS:
            payload[key] = [item for item in _LIST_SEPARATOR.split(value) if item.strip()]
        else:
            payload[key] = value
    payload.setdefault("role", default_role.value)
    return payload


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", []))
    return f"{field}: {error.get('msg')}" if field else error.get("msg", "invalid row")


def process_bulk_upload(
    db: Session,
    content: bytes,
    default_role: ProfileType = ProfileType.ALUMNI,
) -> BulkUploadResult:
    """
    Create or update users and profiles from CSV bytes.

    New emails get an account with a generated password and a profile.
    Existing emails only have their profile updated.
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InvalidUploadFile("File must be UTF-8 encoded CSV")

    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise InvalidUploadFile("CSV file has no header row")
    reader.fieldnames = [_normalize_header(name) for name in reader.fieldnames]
    missing = {"email", "first_name", "last_name"} - set(reader.fieldnames)
    if missing:
        raise InvalidUploadFile(f"Missing required columns: {', '.join(sorted(missing))}")

    rows = list(reader)
    if len(rows) > settings.BULK_UPLOAD_MAX_ROWS:
        raise InvalidUploadFile(f"At most {settings.BULK_UPLOAD_MAX_ROWS} rows can be uploaded at once")

    result = BulkUploadResult()
    for index, raw in enumerate(rows, start=2):  # row 1 is the header
        result.processed += 1
        email = (raw.get("email") or "").strip() or None
        try:
            row = BulkUserRow(**_row_payload(raw, default_role))
        except ValidationError as e:
            result.failed += 1
            result.errors.append(BulkUploadError(row=index, email=email, error=_first_error(e)))
            continue

        profile_fields = row.model_dump(exclude_unset=True, exclude={"email", "role"})
        try:
            existing = get_user_by_email(db, row.email)
            if existing:
                profile = get_profile_by_user_id(db, existing.id)
                if profile is None:
                    db.add(build_profile(existing.id, profile_type=row.role.value, **profile_fields))
                    db.commit()
                else:
                    update_profile(db, profile, ProfileUpdate(**profile_fields))
                result.updated += 1
            else:
                user = create_user(db, row.email, generate_strong_password(), row.role.value)
                db.add(build_profile(user.id, profile_type=row.role.value, **profile_fields))
                db.commit()
                result.created += 1
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Bulk upload row {index} failed: {e}")
            result.failed += 1
            result.errors.append(BulkUploadError(row=index, email=email, error="Could not save row"))

    logger.info(
        f"Bulk upload processed {result.processed} rows: "
        f"{result.created} created, {result.updated} updated, {result.failed} failed"
    )
    return result
