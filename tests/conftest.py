from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import Database
from app.main import create_app
from app.schemas import AnonymizedView, ApplicantStatus, ContactView, PositionCount, StatsData, StatusView
from services.errors import DuplicateApplication, IdentifierCollision, NotFound
from services.query import ApplicantFilter, PageRequest
from services.store import present_experience
from services.validation import ValidatedApplicant


@dataclass
class _Row:
    anonymous_id: str
    record: ValidatedApplicant
    submitted_at: datetime
    status: ApplicantStatus = ApplicantStatus.PENDING


class InMemoryApplicantStore:
    """Dict-backed store honouring the same uniqueness and projection rules."""

    def __init__(self) -> None:
        self.rows: list[_Row] = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.create_calls = 0

    async def create(self, record: ValidatedApplicant, anonymous_id: str) -> str:
        self.create_calls += 1
        if any(r.record.email == record.email and r.record.position == record.position for r in self.rows):
            raise DuplicateApplication()
        if any(r.anonymous_id == anonymous_id for r in self.rows):
            raise IdentifierCollision(anonymous_id)
        self._clock += timedelta(seconds=1)
        self.rows.append(_Row(anonymous_id=anonymous_id, record=record, submitted_at=self._clock))
        return anonymous_id

    async def list_anonymized(
        self, applicant_filter: ApplicantFilter, page: PageRequest
    ) -> tuple[list[AnonymizedView], int]:
        def matches(row: _Row) -> bool:
            record = row.record
            if applicant_filter.position and applicant_filter.position.lower() not in record.position.lower():
                return False
            if applicant_filter.experience_min is not None and record.experience < applicant_filter.experience_min:
                return False
            if applicant_filter.experience_max is not None and record.experience > applicant_filter.experience_max:
                return False
            if applicant_filter.skills:
                return any(
                    term.lower() in skill.lower() for term in applicant_filter.skills for skill in record.skills
                )
            return True

        selected = sorted((row for row in self.rows if matches(row)), key=lambda row: row.submitted_at, reverse=True)
        window = selected[page.offset : page.offset + page.limit]
        items = [
            AnonymizedView(
                anonymous_id=row.anonymous_id,
                position=row.record.position,
                experience=present_experience(row.record.experience),
                skills=list(row.record.skills),
                education=row.record.education,
                submitted_at=row.submitted_at,
                status=row.status,
            )
            for row in window
        ]
        return items, len(selected)

    async def get_contact(self, anonymous_id: str) -> ContactView:
        row = self._find(anonymous_id)
        return ContactView(name=row.record.name, email=row.record.email, phone=row.record.phone)

    async def update_status(self, anonymous_id: str, status: ApplicantStatus) -> StatusView:
        row = self._find(anonymous_id)
        row.status = status
        return StatusView(anonymous_id=row.anonymous_id, status=status)

    async def stats(self, *, top_positions: int = 10) -> StatsData:
        by_status = {status.value: 0 for status in ApplicantStatus}
        by_position: dict[str, int] = {}
        for row in self.rows:
            by_status[row.status.value] += 1
            by_position[row.record.position] = by_position.get(row.record.position, 0) + 1
        ranked = sorted(by_position.items(), key=lambda item: (-item[1], item[0]))[:top_positions]
        return StatsData(
            total_applications=len(self.rows),
            applications_by_status=by_status,
            applications_by_position=[PositionCount(position=p, count=c) for p, c in ranked],
        )

    def _find(self, anonymous_id: str) -> _Row:
        for row in self.rows:
            if row.anonymous_id == anonymous_id:
                return row
        raise NotFound()


def make_record(**overrides) -> ValidatedApplicant:
    values = {
        "name": "Jane Doe",
        "email": "jane@x.com",
        "phone": "+12025550123",
        "position": "Engineer",
        "experience": 3.0,
        "education": "BSc",
        "skills": ["Go", "SQL"],
    }
    values.update(overrides)
    return ValidatedApplicant(**values)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def jane_payload() -> dict:
    return {
        "name": "Jane Doe",
        "email": "jane@x.com",
        "phone": "+12025550123",
        "position": "Engineer",
        "experience": 3,
        "skills": "Go,SQL",
        "education": "BSc",
    }


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'applicants.db'}",
        data_directory=tmp_path,
        log_level="WARNING",
    )


@pytest.fixture
def fake_store() -> InMemoryApplicantStore:
    return InMemoryApplicantStore()


@pytest.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    db = Database(settings.database_url)
    await db.init_models()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client
