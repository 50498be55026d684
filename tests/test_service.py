import pytest

from app.schemas import ApplicantStatus
from services import ApplicantService
from services.errors import DuplicateApplication, IdentifierCollision, InvalidStatus, NotFound, ValidationError
from services.query import ApplicantFilter, PageRequest


@pytest.fixture
def service(fake_store, settings):
    return ApplicantService(fake_store, settings)


def _sequence(*ids):
    queue = list(ids)
    return lambda: queue.pop(0)


async def test_round_trip(service, jane_payload):
    anonymous_id = await service.submit(jane_payload)

    items, pagination = await service.list_applicants(ApplicantFilter(position="Engineer"), PageRequest())
    assert [item.anonymous_id for item in items] == [anonymous_id]
    assert items[0].skills == ["Go", "SQL"]
    assert pagination.total == 1

    contact = await service.reveal_contact(anonymous_id)
    assert contact.model_dump() == {"name": "Jane Doe", "email": "jane@x.com", "phone": "+12025550123"}
    assert await service.reveal_contact(anonymous_id) == contact


async def test_reveal_normalises_case(service, jane_payload):
    anonymous_id = await service.submit(jane_payload)
    contact = await service.reveal_contact(anonymous_id.lower())
    assert contact.email == "jane@x.com"


async def test_submissions_get_distinct_identifiers(service, jane_payload):
    issued = set()
    for index in range(200):
        jane_payload["email"] = f"applicant{index}@x.com"
        issued.add(await service.submit(jane_payload))
    assert len(issued) == 200


async def test_duplicate_submission(service, jane_payload):
    await service.submit(jane_payload)
    jane_payload.update(name="Janet", skills=["Rust"], experience=9)
    with pytest.raises(DuplicateApplication):
        await service.submit(jane_payload)


async def test_invalid_submission_never_reaches_store(service, fake_store, jane_payload):
    jane_payload["experience"] = 50.1
    with pytest.raises(ValidationError):
        await service.submit(jane_payload)
    assert fake_store.create_calls == 0


async def test_identifier_collision_is_retried(fake_store, settings, jane_payload):
    service = ApplicantService(fake_store, settings, id_factory=_sequence("appfirst", "appfirst", "appsecond"))
    assert await service.submit(jane_payload) == "APPFIRST"

    jane_payload["email"] = "other@x.com"
    assert await service.submit(jane_payload) == "APPSECOND"
    assert fake_store.create_calls == 3


async def test_identifier_collision_gives_up(fake_store, settings, jane_payload):
    settings.identifier_retry_attempts = 2
    service = ApplicantService(fake_store, settings, id_factory=lambda: "APPSTUCK")
    await service.submit(jane_payload)

    jane_payload["email"] = "other@x.com"
    with pytest.raises(IdentifierCollision):
        await service.submit(jane_payload)
    assert fake_store.create_calls == 3


async def test_update_status(service, jane_payload):
    anonymous_id = await service.submit(jane_payload)

    view = await service.update_status(anonymous_id, "reviewed")
    assert view.status is ApplicantStatus.REVIEWED
    view = await service.update_status(anonymous_id, "pending")
    assert view.status is ApplicantStatus.PENDING

    for bad in ("approved", None, "REVIEWED"):
        with pytest.raises(InvalidStatus):
            await service.update_status(anonymous_id, bad)

    with pytest.raises(NotFound):
        await service.update_status("APPMISSING", "rejected")


async def test_pagination_contract(service, jane_payload):
    for index in range(3):
        jane_payload["email"] = f"a{index}@x.com"
        await service.submit(jane_payload)

    items, pagination = await service.list_applicants(ApplicantFilter(), PageRequest(page=4, limit=1))
    assert items == []
    assert pagination.total_pages == 3
    assert pagination.has_next is False


async def test_stats(service, jane_payload):
    await service.submit(jane_payload)
    stats = await service.stats()
    assert stats.total_applications == 1
    assert stats.applications_by_status["pending"] == 1
    assert stats.applications_by_position[0].position == "Engineer"
