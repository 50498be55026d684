"""Normalisation of listing filters and pagination parameters."""
from __future__ import annotations

import math
import sys
from dataclasses import dataclass

from app.schemas import Pagination
from services.errors import InvalidFormat, ValidationError
from services.validation import parse_number, split_skills


@dataclass(frozen=True)
class ApplicantFilter:
    position: str | None = None
    experience_min: float | None = None
    experience_max: float | None = None
    skills: tuple[str, ...] = ()


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _optional_bound(value: str | None, field: str) -> float | None:
    if value is None or not value.strip():
        return None
    number = parse_number(value)
    if number is None:
        raise ValidationError([InvalidFormat(field, f"{field} must be a number")])
    return number


def parse_filter(
    *,
    position: str | None = None,
    min_experience: str | None = None,
    max_experience: str | None = None,
    skills: str | None = None,
) -> ApplicantFilter:
    return ApplicantFilter(
        position=position.strip() if position and position.strip() else None,
        experience_min=_optional_bound(min_experience, "minExperience"),
        experience_max=_optional_bound(max_experience, "maxExperience"),
        skills=tuple(split_skills(skills)) if skills else (),
    )


def _parse_int(value: str | int | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def parse_page(
    page: str | int | None,
    limit: str | int | None,
    *,
    default_limit: int = 10,
    max_limit: int = 50,
) -> PageRequest:
    """Clamp page to [1, sys.maxsize // max_limit] and limit to [1, max_limit].

    Garbage falls back to defaults. The page cap keeps the row offset within a
    64-bit integer.
    """

    return PageRequest(
        page=min(sys.maxsize // max_limit, max(1, _parse_int(page, 1))),
        limit=min(max_limit, max(1, _parse_int(limit, default_limit))),
    )


def build_pagination(request: PageRequest, total: int) -> Pagination:
    total_pages = math.ceil(total / request.limit)
    return Pagination(
        page=request.page,
        limit=request.limit,
        total=total,
        total_pages=total_pages,
        has_next=request.page < total_pages,
        has_prev=request.page > 1,
    )
