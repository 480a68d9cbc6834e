from datetime import date, datetime, timedelta
from typing import Any, Optional
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, validate_email
from pydantic_core import PydanticCustomError

from ..core.security import UserRole

ALPHA_RE = re.compile(r"^[A-Za-z]+$")

# Calendar (YYYY, YYYY-MM, YYYY-MM-DD, YYYYMMDD), week (YYYY-Www[-D]) and
# ordinal (YYYY-DDD, YYYYDDD) dates, optionally followed by a time of day
ISO8601_RE = re.compile(r"""
    ^(?P<year>\d{4})
    (?:
        (?P<sep>-?)
        (?:
            (?P<month>0[1-9]|1[0-2])(?:(?P=sep)(?P<day>0[1-9]|[12]\d|3[01]))?
          | W(?P<week>[0-4]\d|5[0-3])(?:(?P=sep)(?P<weekday>[1-7]))?
          | (?P<ordinal>\d{3})
        )
        (?P<time>
            [T\s]
            (?:[01]\d|2[0-3])
            (?::?[0-5]\d(?::?[0-5]\d(?:[.,]\d+)?)?)?
            (?:[zZ]|[+-](?:[01]\d|2[0-3])(?::?[0-5]\d)?)?
        )?
    )?$
""", re.VERBOSE)

def parse_iso8601_date(value: Any) -> date:
    """Accept an ISO-8601 date or date-time and return the calendar date.

    Reduced precision dates resolve to the first day of the period
    ("1990" is 1990-01-01, "1990-05" is 1990-05-01). The date of a
    date-time is taken as written, whatever its offset.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("empty birthdate")

    match = ISO8601_RE.match(value.strip())
    if not match:
        raise ValueError(f"not an ISO-8601 date: {value!r}")

    parts = match.groupdict()
    year = int(parts["year"])
    complete = parts["day"] or parts["ordinal"] or parts["weekday"]
    if parts["time"] and not complete:
        raise ValueError("time without a complete date")

    if parts["month"]:
        # YYYYMM is not an ISO-8601 form
        if not parts["day"] and not parts["sep"]:
            raise ValueError("basic format year-month")
        return date(year, int(parts["month"]), int(parts["day"] or 1))
    if parts["week"]:
        return date.fromisocalendar(year, int(parts["week"]), int(parts["weekday"] or 1))
    if parts["ordinal"]:
        day_of_year = int(parts["ordinal"])
        if not 1 <= day_of_year <= date(year, 12, 31).timetuple().tm_yday:
            raise ValueError(f"day of year out of range: {day_of_year}")
        return date(year, 1, 1) + timedelta(days=day_of_year - 1)
    return date(year, 1, 1)

class SignupRequest(BaseModel):
    """Signup payload; every field is checked before any record is written."""

    model_config = ConfigDict(validate_default=True)

    username: str = ""
    email: str = ""
    password: str = ""
    firstname: str = ""
    lastname: str = ""
    birthdate: Optional[date] = None

    @field_validator("username")
    @classmethod
    def username_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("username_required", "Username is required")
        return value

    @field_validator("email")
    @classmethod
    def email_valid(cls, value: str) -> str:
        value = value.strip()
        try:
            _, email = validate_email(value)
        except ValueError:
            raise PydanticCustomError("email_invalid", "Email must be valid")
        # Bare addresses only ("Name <a@b.com>" is rejected), stored as sent
        if email.lower() != value.lower():
            raise PydanticCustomError("email_invalid", "Email must be valid")
        return value

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        value = value.strip()
        if not 4 <= len(value) <= 20:
            raise PydanticCustomError(
                "password_length", "Password must be between 4 and 20 characters"
            )
        return value

    @field_validator("firstname")
    @classmethod
    def firstname_alpha(cls, value: str) -> str:
        value = value.strip()
        if not ALPHA_RE.match(value):
            raise PydanticCustomError("firstname_required", "Firstname is required")
        return value

    @field_validator("lastname")
    @classmethod
    def lastname_alpha(cls, value: str) -> str:
        value = value.strip()
        if not ALPHA_RE.match(value):
            raise PydanticCustomError("lastname_required", "Lastname is required")
        return value

    @field_validator("birthdate", mode="before")
    @classmethod
    def birthdate_iso8601(cls, value: Any) -> date:
        try:
            return parse_iso8601_date(value)
        except (TypeError, ValueError):
            raise PydanticCustomError("birthdate_required", "Birthdate is required")

class SignupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: Optional[str] = None
    email: Optional[str] = None
    person_id: int = Field(alias="personId")

class UserSignin(BaseModel):
    username: str
    password: str

class RefreshTokenRequest(BaseModel):
    refresh_token: str

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: UserRole
    is_active: bool
    person_id: Optional[int] = None
    is_admin: bool = False
    is_doctor: bool = False
    is_patient: bool = False
    created_at: Optional[datetime] = None

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse

class RoleUpdate(BaseModel):
    role: UserRole
