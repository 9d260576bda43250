"""
Pydantic schemas for Regula passport devices and their photos.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


_GENDER_ALIASES = {
    "m": Gender.MALE,
    "male": Gender.MALE,
    "f": Gender.FEMALE,
    "female": Gender.FEMALE,
}


def normalize_gender(value: Any, *, strict: bool = True) -> Gender:
    """Empty means the male default; unknown values raise unless ``strict`` is off."""
    if isinstance(value, Gender):
        return value
    key = str(value or "").strip().lower()
    if not key:
        return Gender.MALE
    gender = _GENDER_ALIASES.get(key)
    if gender is None:
        if strict:
            raise ValueError(f"Unknown gender: {value!r}")
        return Gender.MALE
    return gender


def normalize_photo_id(value: Any) -> int | None:
    """0, empty and missing all mean "no photo"; None is the only sentinel kept."""
    if value is None or value == "":
        return None
    try:
        photo_id = int(value)
    except (TypeError, ValueError):
        return None
    return photo_id if photo_id > 0 else None


def parse_delayed_response(value: Any) -> int | None:
    """Numeric form input to a non-negative int, anything else to None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if value != value or value < 0 or not value.is_integer():
            return None
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return parse_delayed_response(number)


def to_date_input(value: Any) -> str:
    """Drop any time-of-day component, leaving ``YYYY-MM-DD`` (or "")."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    for sep in ("T", " "):
        if sep in text:
            text = text.split(sep, 1)[0]
    return text


class Photo(BaseModel):
    """Photo resource; bytes come from ``url``, ``image_data`` or the per-id endpoint."""
    model_config = ConfigDict(extra="ignore")

    id: int
    file_name: str = ""
    content_type: str = "image/jpeg"
    created_at: datetime | None = None
    url: str | None = None
    image_data: str | None = None


class RegulaRecord(BaseModel):
    """Regula device as returned by the backend."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    last_name: str = ""
    first_name: str = ""
    middle_name: str | None = ""
    birth_date: str = ""
    issue_date: str = ""
    series: str = ""
    number: str = ""
    department_code: str = ""
    issued_by: str = ""
    birth_place: str = ""
    gender: str = Gender.MALE.value
    photo_id: int | None = None
    delayed_response: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    photo: Photo | None = None

    @field_validator("photo_id", mode="before")
    @classmethod
    def _photo_id(cls, value: Any) -> int | None:
        return normalize_photo_id(value)

    @field_validator("birth_date", "issue_date", mode="before")
    @classmethod
    def _dates(cls, value: Any) -> str:
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return "" if value is None else str(value)

    @field_validator(
        "name", "last_name", "first_name", "series", "number",
        "department_code", "issued_by", "birth_place", mode="before",
    )
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class RegulaDraft(BaseModel):
    """Editable passport fields; every field always holds a value."""
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    name: str = ""
    last_name: str = ""
    first_name: str = ""
    middle_name: str = ""
    birth_date: str = ""
    issue_date: str = ""
    series: str = ""
    number: str = ""
    department_code: str = ""
    issued_by: str = ""
    birth_place: str = ""
    gender: Gender = Gender.MALE
    photo_id: int | None = Field(default=None)
    delayed_response: int | None = Field(default=None)

    @field_validator("photo_id", mode="before")
    @classmethod
    def _photo_id(cls, value: Any) -> int | None:
        return normalize_photo_id(value)

    @field_validator("delayed_response", mode="before")
    @classmethod
    def _delayed_response(cls, value: Any) -> int | None:
        return parse_delayed_response(value)

    @field_validator("gender", mode="before")
    @classmethod
    def _gender(cls, value: Any) -> Gender:
        return normalize_gender(value)

    @field_validator("birth_date", "issue_date", mode="before")
    @classmethod
    def _dates(cls, value: Any) -> str:
        return to_date_input(value)

    @field_validator(
        "name", "last_name", "first_name", "middle_name", "series", "number",
        "department_code", "issued_by", "birth_place", mode="before",
    )
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @classmethod
    def from_record(cls, record: RegulaRecord) -> "RegulaDraft":
        data = record.model_dump(include=set(cls.model_fields))
        # Records from the server are shown even when they carry an odd gender value.
        data["gender"] = normalize_gender(data.get("gender"), strict=False)
        return cls(**data)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class PhotoUpload(BaseModel):
    """Base64 JSON upload body."""
    image_data: str
    file_name: str
    content_type: str
