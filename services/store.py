"""Applicant persistence: the store contract and its SQLAlchemy implementation."""
from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import ColumnElement, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import load_only, selectinload

from app.models import Applicant, ApplicantSkill
from app.schemas import AnonymizedView, ApplicantStatus, ContactView, PositionCount, StatsData, StatusView
from services.errors import DuplicateApplication, IdentifierCollision, NotFound
from services.query import ApplicantFilter, PageRequest
from services.validation import ValidatedApplicant

logger = logging.getLogger(__name__)


class ApplicantStore(Protocol):
    """Operations the disclosure gateway relies on.

    ``list_anonymized`` is the only multi-record read and never yields identity
    fields; ``get_contact`` is single-record and keyed by exact identifier.
    """

    async def create(self, record: ValidatedApplicant, anonymous_id: str) -> str: ...

    async def list_anonymized(
        self, applicant_filter: ApplicantFilter, page: PageRequest
    ) -> tuple[list[AnonymizedView], int]: ...

    async def get_contact(self, anonymous_id: str) -> ContactView: ...

    async def update_status(self, anonymous_id: str, status: ApplicantStatus) -> StatusView: ...

    async def stats(self, *, top_positions: int = 10) -> StatsData: ...


def present_experience(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


class SqlApplicantStore:
    """Applicant store backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, record: ValidatedApplicant, anonymous_id: str) -> str:
        if await self._application_exists(record.email, record.position):
            raise DuplicateApplication()

        applicant = Applicant(
            anonymous_id=anonymous_id,
            name=record.name,
            email=record.email,
            phone=record.phone,
            position=record.position,
            experience=record.experience,
            education=record.education,
            status=ApplicantStatus.PENDING.value,
            skills=[ApplicantSkill(ordinal=index, name=skill) for index, skill in enumerate(record.skills)],
        )
        self.session.add(applicant)
        try:
            await self.session.commit()
        except IntegrityError:
            # The pre-check can race with a concurrent insert; the constraints decide.
            await self.session.rollback()
            logger.info("Insert of %s rejected by a unique constraint", anonymous_id)
            if await self._application_exists(record.email, record.position):
                raise DuplicateApplication() from None
            if await self._identifier_exists(anonymous_id):
                raise IdentifierCollision(anonymous_id) from None
            raise
        return anonymous_id

    async def list_anonymized(
        self, applicant_filter: ApplicantFilter, page: PageRequest
    ) -> tuple[list[AnonymizedView], int]:
        conditions = self._conditions(applicant_filter)

        count_stmt = select(func.count()).select_from(Applicant).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()
        if page.offset >= total:
            return [], total

        stmt = (
            select(Applicant)
            .options(
                load_only(
                    Applicant.anonymous_id,
                    Applicant.position,
                    Applicant.experience,
                    Applicant.education,
                    Applicant.submitted_at,
                    Applicant.status,
                ),
                selectinload(Applicant.skills),
            )
            .where(*conditions)
            .order_by(Applicant.submitted_at.desc(), Applicant.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        result = await self.session.execute(stmt)
        items = [
            AnonymizedView(
                anonymous_id=applicant.anonymous_id,
                position=applicant.position,
                experience=present_experience(applicant.experience),
                skills=[skill.name for skill in applicant.skills],
                education=applicant.education,
                submitted_at=applicant.submitted_at,
                status=ApplicantStatus(applicant.status),
            )
            for applicant in result.scalars().all()
        ]
        return items, total

    async def get_contact(self, anonymous_id: str) -> ContactView:
        stmt = select(Applicant.name, Applicant.email, Applicant.phone).where(Applicant.anonymous_id == anonymous_id)
        row = (await self.session.execute(stmt)).one_or_none()
        if row is None:
            raise NotFound()
        return ContactView(name=row.name, email=row.email, phone=row.phone)

    async def update_status(self, anonymous_id: str, status: ApplicantStatus) -> StatusView:
        stmt = update(Applicant).where(Applicant.anonymous_id == anonymous_id).values(status=status.value)
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFound()
        await self.session.commit()
        return StatusView(anonymous_id=anonymous_id, status=status)

    async def stats(self, *, top_positions: int = 10) -> StatsData:
        total = (await self.session.execute(select(func.count()).select_from(Applicant))).scalar_one()

        by_status = {status.value: 0 for status in ApplicantStatus}
        status_rows = await self.session.execute(
            select(Applicant.status, func.count(Applicant.id)).group_by(Applicant.status)
        )
        for status, count in status_rows.all():
            by_status[status] = count

        position_count = func.count(Applicant.id).label("count")
        position_rows = await self.session.execute(
            select(Applicant.position, position_count)
            .group_by(Applicant.position)
            .order_by(position_count.desc(), Applicant.position)
            .limit(top_positions)
        )
        return StatsData(
            total_applications=total,
            applications_by_status=by_status,
            applications_by_position=[
                PositionCount(position=position, count=count) for position, count in position_rows.all()
            ],
        )

    @staticmethod
    def _conditions(applicant_filter: ApplicantFilter) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = []
        if applicant_filter.position:
            conditions.append(Applicant.position.icontains(applicant_filter.position, autoescape=True))
        if applicant_filter.experience_min is not None:
            conditions.append(Applicant.experience >= applicant_filter.experience_min)
        if applicant_filter.experience_max is not None:
            conditions.append(Applicant.experience <= applicant_filter.experience_max)
        if applicant_filter.skills:
            skill_match = (
                select(ApplicantSkill.id)
                .where(
                    ApplicantSkill.applicant_id == Applicant.id,
                    or_(*(ApplicantSkill.name.icontains(term, autoescape=True) for term in applicant_filter.skills)),
                )
                .exists()
            )
            conditions.append(skill_match)
        return conditions

    async def _application_exists(self, email: str, position: str) -> bool:
        stmt = select(Applicant.id).where(Applicant.email == email, Applicant.position == position).limit(1)
        return (await self.session.execute(stmt)).first() is not None

    async def _identifier_exists(self, anonymous_id: str) -> bool:
        stmt = select(Applicant.id).where(Applicant.anonymous_id == anonymous_id).limit(1)
        return (await self.session.execute(stmt)).first() is not None
