"""Submission validation and normalisation."""
from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from services.errors import FieldError, InvalidFormat, MissingField, OutOfRange, ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")

EMAIL_MAX_LENGTH = 255
SKILL_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 40
EXPERIENCE_MIN = 0
EXPERIENCE_MAX = 50

REQUIRED_FIELDS = ("name", "email", "phone", "position", "experience", "skills", "education")


@dataclass
class ValidatedApplicant:
    name: str
    email: str
    phone: str
    position: str
    experience: float
    education: str
    skills: list[str] = field(default_factory=list)


def split_skills(value: str | Sequence[str]) -> list[str]:
    """Accept a comma-delimited string or a sequence; trim and drop empty entries."""

    items = value.split(",") if isinstance(value, str) else list(value)
    return [item.strip() for item in items if item.strip()]


def parse_number(value: Any) -> float | None:
    """Coerce ints, floats and numeric strings; return ``None`` for anything else."""

    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class _Collector:
    def __init__(self, payload: Mapping[str, Any]) -> None:
        self.payload = payload
        self.errors: list[FieldError] = []

    def text(self, name: str, *, min_length: int, max_length: int, label: str) -> str:
        value = self.payload.get(name)
        if not isinstance(value, str):
            self.errors.append(InvalidFormat(name, f"{label} must be text"))
            return ""
        value = value.strip()
        if not min_length <= len(value) <= max_length:
            self.errors.append(
                InvalidFormat(name, f"{label} must be between {min_length} and {max_length} characters")
            )
        return value

    def email(self) -> str:
        value = self.payload.get("email")
        if not isinstance(value, str):
            self.errors.append(InvalidFormat("email", "Invalid email format"))
            return ""
        value = value.strip().lower()
        if len(value) > EMAIL_MAX_LENGTH:
            self.errors.append(InvalidFormat("email", f"Email must be at most {EMAIL_MAX_LENGTH} characters"))
        elif not EMAIL_PATTERN.match(value):
            self.errors.append(InvalidFormat("email", "Invalid email format"))
        return value

    def phone(self) -> str:
        value = self.payload.get("phone")
        if not isinstance(value, str):
            self.errors.append(InvalidFormat("phone", "Invalid phone number format"))
            return ""
        value = value.strip()
        if len(value) > PHONE_MAX_LENGTH or not PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", value)):
            self.errors.append(InvalidFormat("phone", "Invalid phone number format"))
        return value

    def experience(self) -> float:
        number = parse_number(self.payload.get("experience"))
        if number is None:
            self.errors.append(InvalidFormat("experience", "Experience must be a number"))
            return 0.0
        if not EXPERIENCE_MIN <= number <= EXPERIENCE_MAX:
            self.errors.append(
                OutOfRange("experience", f"Experience must be between {EXPERIENCE_MIN} and {EXPERIENCE_MAX} years")
            )
        return number

    def skills(self) -> list[str]:
        value = self.payload.get("skills")
        if not isinstance(value, (str, list, tuple)) or not all(
            isinstance(item, str) for item in ([] if isinstance(value, str) else value)
        ):
            self.errors.append(InvalidFormat("skills", "Skills must be a list of text or a comma-separated string"))
            return []
        skills = split_skills(value)
        if not skills:
            self.errors.append(InvalidFormat("skills", "At least one skill is required"))
        elif any(len(skill) > SKILL_MAX_LENGTH for skill in skills):
            self.errors.append(InvalidFormat("skills", f"Each skill must be at most {SKILL_MAX_LENGTH} characters"))
        return skills


def validate_submission(payload: Mapping[str, Any]) -> ValidatedApplicant:
    """Check every field rule and return the normalised applicant.

    Raises :class:`ValidationError` carrying all violations found.
    """

    missing = [MissingField(name) for name in REQUIRED_FIELDS if _is_blank(payload.get(name))]
    if missing:
        raise ValidationError(missing)

    collector = _Collector(payload)
    applicant = ValidatedApplicant(
        name=collector.text("name", min_length=2, max_length=100, label="Name"),
        email=collector.email(),
        phone=collector.phone(),
        position=collector.text("position", min_length=2, max_length=100, label="Position"),
        experience=collector.experience(),
        education=collector.text("education", min_length=2, max_length=200, label="Education"),
        skills=collector.skills(),
    )
    if collector.errors:
        raise ValidationError(collector.errors)
    return applicant
