"""Applicant intake and selective disclosure."""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from app.config import Settings
from app.schemas import AnonymizedView, ApplicantStatus, ContactView, Pagination, StatsData, StatusView
from services.errors import IdentifierCollision, InvalidStatus
from services.identifiers import generate_anonymous_id, normalize_anonymous_id
from services.query import ApplicantFilter, PageRequest, build_pagination
from services.store import ApplicantStore
from services.validation import validate_submission

logger = logging.getLogger(__name__)


class ApplicantService:
    """Route every read through exactly one projection of an applicant.

    The anonymised listing is the only multi-record read. Contact details are
    fetched one applicant at a time, by exact identifier, so a reviewer has to
    pick a candidate from the anonymised list before seeing who they are.
    """

    def __init__(
        self,
        store: ApplicantStore,
        settings: Settings,
        *,
        id_factory: Callable[[], str] = generate_anonymous_id,
    ) -> None:
        self.store = store
        self.settings = settings
        self.id_factory = id_factory

    async def submit(self, payload: Mapping[str, Any]) -> str:
        record = validate_submission(payload)

        attempts = max(1, self.settings.identifier_retry_attempts)
        attempt = 1
        while True:
            anonymous_id = normalize_anonymous_id(self.id_factory())
            try:
                await self.store.create(record, anonymous_id)
            except IdentifierCollision:
                logger.warning("Identifier collision on attempt %d/%d", attempt, attempts)
                if attempt >= attempts:
                    raise
                attempt += 1
                continue
            logger.info("Accepted application %s", anonymous_id)
            return anonymous_id

    async def list_applicants(
        self, applicant_filter: ApplicantFilter, page: PageRequest
    ) -> tuple[list[AnonymizedView], Pagination]:
        items, total = await self.store.list_anonymized(applicant_filter, page)
        return items, build_pagination(page, total)

    async def reveal_contact(self, anonymous_id: str) -> ContactView:
        return await self.store.get_contact(normalize_anonymous_id(anonymous_id))

    async def update_status(self, anonymous_id: str, status: str | None) -> StatusView:
        try:
            new_status = ApplicantStatus(status)
        except ValueError:
            raise InvalidStatus() from None
        view = await self.store.update_status(normalize_anonymous_id(anonymous_id), new_status)
        logger.info("Application %s marked %s", view.anonymous_id, view.status.value)
        return view

    async def stats(self) -> StatsData:
        return await self.store.stats(top_positions=self.settings.top_positions_limit)
