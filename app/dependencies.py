"""FastAPI dependency helpers."""
from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import Database
from services import ApplicantService, SqlApplicantStore


async def db_session(request: Request) -> AsyncIterator[AsyncSession]:
    database: Database = request.app.state.database
    async for session in database.session():
        yield session


def settings_provider(request: Request) -> Settings:
    return request.app.state.settings


def applicant_service(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> ApplicantService:
    return ApplicantService(SqlApplicantStore(session), settings)
