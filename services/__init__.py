"""Service layer for applicant intake and disclosure."""

from .applicants import ApplicantService
from .store import ApplicantStore, SqlApplicantStore

__all__ = ["ApplicantService", "ApplicantStore", "SqlApplicantStore"]
