"""Tests for the issue store against an in-memory database."""

from datetime import timedelta
from uuid import uuid4

import pytest
import pytest_asyncio

from issue_reporter.models.issues import IssueStatus, IssueType
from issue_reporter.schemas.issues import IssueCreate, IssueRead
from issue_reporter.services.accounts import AccountService
from issue_reporter.services.issue_store import IssueNotFoundError, IssueStore
from issue_reporter.utils.clock import advance, as_utc, utcnow
from tests.conftest import PASSWORD, issue_payload


@pytest_asyncio.fixture
async def reporter(db_session):
    return await AccountService(db_session).create_account(
        "reporter@cityreports.org", PASSWORD, "Robin Reporter"
    )


@pytest.mark.asyncio
async def test_create_issue_starts_pending(db_session, reporter):
    issue = await IssueStore(db_session).create_issue(reporter.id, IssueCreate(**issue_payload()))

    assert issue.status == IssueStatus.PENDING
    assert issue.user_id == reporter.id
    assert issue.issue_type == IssueType.POTHOLE
    assert issue.created_at == issue.updated_at
    assert issue.admin_notes is None


@pytest.mark.asyncio
async def test_status_change_advances_updated_at(db_session, reporter):
    store = IssueStore(db_session)
    issue = await store.create_issue(reporter.id, IssueCreate(**issue_payload()))
    before = as_utc(issue.updated_at)
    created = as_utc(issue.created_at)

    updated, changed = await store.update_status(issue.id, IssueStatus.IN_PROGRESS)

    assert changed is True
    assert updated.status == IssueStatus.IN_PROGRESS
    assert as_utc(updated.updated_at) > before
    assert as_utc(updated.created_at) == created


@pytest.mark.asyncio
async def test_same_status_is_a_no_op(db_session, reporter):
    store = IssueStore(db_session)
    issue = await store.create_issue(reporter.id, IssueCreate(**issue_payload()))
    stamp = issue.updated_at

    unchanged, changed = await store.update_status(issue.id, IssueStatus.PENDING)

    assert changed is False
    assert unchanged.updated_at == stamp


@pytest.mark.asyncio
async def test_any_transition_is_allowed(db_session, reporter):
    store = IssueStore(db_session)
    issue = await store.create_issue(reporter.id, IssueCreate(**issue_payload()))

    await store.update_status(issue.id, IssueStatus.RESOLVED)
    reopened, changed = await store.update_status(issue.id, IssueStatus.PENDING)

    assert changed is True
    assert reopened.status == IssueStatus.PENDING


@pytest.mark.asyncio
async def test_admin_notes_update(db_session, reporter):
    store = IssueStore(db_session)
    issue = await store.create_issue(reporter.id, IssueCreate(**issue_payload()))

    noted, changed = await store.update_admin_notes(issue.id, "  Crew dispatched  ")
    assert changed is True
    assert noted.admin_notes == "Crew dispatched"

    _, changed = await store.update_admin_notes(issue.id, "Crew dispatched")
    assert changed is False

    cleared, changed = await store.update_admin_notes(issue.id, "   ")
    assert changed is True
    assert cleared.admin_notes is None


@pytest.mark.asyncio
async def test_unknown_issue_raises(db_session):
    store = IssueStore(db_session)
    missing = uuid4()

    assert await store.find_issue(missing) is None
    with pytest.raises(IssueNotFoundError) as exc:
        await store.update_status(missing, IssueStatus.RESOLVED)
    assert exc.value.issue_id == missing


@pytest.mark.asyncio
async def test_listings_are_newest_first_and_scoped(db_session, reporter):
    store = IssueStore(db_session)
    other = await AccountService(db_session).create_account(
        "other@cityreports.org", PASSWORD, "Other"
    )
    first = await store.create_issue(reporter.id, IssueCreate(**issue_payload()))
    second = await store.create_issue(other.id, IssueCreate(**issue_payload(issue_type="garbage")))
    third = await store.create_issue(reporter.id, IssueCreate(**issue_payload(issue_type="drainage")))
    # Force a strict ordering independent of clock resolution.
    second.created_at = advance(first.created_at)
    third.created_at = advance(second.created_at)
    await db_session.commit()

    assert [i.id for i in await store.list_issues()] == [third.id, second.id, first.id]
    assert [i.id for i in await store.list_user_issues(reporter.id)] == [third.id, first.id]


@pytest.mark.asyncio
async def test_read_model_is_timezone_aware(db_session, reporter):
    issue = await IssueStore(db_session).create_issue(reporter.id, IssueCreate(**issue_payload()))
    read = IssueRead.model_validate(issue)

    assert read.created_at.tzinfo is not None
    assert abs(read.created_at - utcnow()) < timedelta(minutes=1)


def test_issue_create_validation():
    with pytest.raises(ValueError):
        IssueCreate(**issue_payload(description="   "))
    with pytest.raises(ValueError):
        IssueCreate(**issue_payload(latitude=91))
    with pytest.raises(ValueError):
        IssueCreate(**issue_payload(user_id=str(uuid4())))

    payload = IssueCreate(**issue_payload(description="  Broken  ", photo_url=" ", location_address=""))
    assert payload.description == "Broken"
    assert payload.photo_url is None
    assert payload.location_address is None


def test_advance_is_strictly_monotonic():
    stamp = utcnow() + timedelta(seconds=5)
    assert advance(stamp) > stamp
    assert advance(stamp, now=stamp + timedelta(days=1)) == stamp + timedelta(days=1)
