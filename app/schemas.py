"""Pydantic schemas shared across services."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApplicantStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    CONTACTED = "contacted"
    REJECTED = "rejected"


class CamelModel(BaseModel):
    """Serialises with camelCase keys, accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApplicantSubmission(BaseModel):
    """Raw submission body; field rules are enforced by the validation layer."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    experience: Any = Field(default=None, description="Years of experience as a number or numeric string")
    skills: list[str] | str | None = Field(default=None, description="List of skills or a comma-separated string")
    education: str | None = None


class StatusUpdate(BaseModel):
    status: str | None = None


class AnonymizedView(CamelModel):
    """Non-identifying projection of an applicant."""

    anonymous_id: str
    position: str
    experience: int | float
    skills: list[str] = Field(default_factory=list)
    education: str
    submitted_at: datetime
    status: ApplicantStatus


class ContactView(CamelModel):
    """Identity projection, only ever returned for a single applicant."""

    name: str
    email: str
    phone: str


class StatusView(CamelModel):
    anonymous_id: str
    status: ApplicantStatus


class PositionCount(CamelModel):
    position: str
    count: int


class StatsData(CamelModel):
    total_applications: int
    applications_by_status: dict[str, int]
    applications_by_position: list[PositionCount] = Field(default_factory=list)


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class SubmissionResponse(CamelModel):
    success: bool = True
    anonymous_id: str
    message: str


class ApplicantListResponse(CamelModel):
    success: bool = True
    data: list[AnonymizedView]
    pagination: Pagination


class ContactResponse(CamelModel):
    success: bool = True
    data: ContactView


class StatusUpdateResponse(CamelModel):
    success: bool = True
    data: StatusView
    message: str


class StatsResponse(CamelModel):
    success: bool = True
    data: StatsData


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: list[dict[str, str]] | None = None
