"""Database models for the applicant store."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Applicant(Base):
    __tablename__ = "applicants"
    __table_args__ = (
        UniqueConstraint("anonymous_id", name="uq_applicants_anonymous_id"),
        UniqueConstraint("email", "position", name="uq_applicants_email_position"),
        Index("ix_applicants_submitted_at", "submitted_at"),
        Index("ix_applicants_position", "position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    anonymous_id: Mapped[str] = mapped_column(String(32), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(40), nullable=False)

    position: Mapped[str] = mapped_column(String(100), nullable=False)
    experience: Mapped[float] = mapped_column(Float, nullable=False)
    education: Mapped[str] = mapped_column(String(200), nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)

    skills: Mapped[list[ApplicantSkill]] = relationship(
        "ApplicantSkill",
        back_populates="applicant",
        cascade="all, delete-orphan",
        order_by="ApplicantSkill.ordinal",
    )


class ApplicantSkill(Base):
    __tablename__ = "applicant_skills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    applicant_id: Mapped[int] = mapped_column(
        ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ordinal: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    applicant: Mapped[Applicant] = relationship("Applicant", back_populates="skills")
