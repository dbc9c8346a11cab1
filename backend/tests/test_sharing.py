"""
Tests for the share / accept / reject draft workflow.
"""
import uuid

import pytest
from sqlalchemy import select, func

from campjournal.core.exceptions import AlreadyExistsError, NotFoundError, ValidationFailedError
from campjournal.models import JournalEntry, Photo, STATUS_DRAFT, STATUS_PUBLISHED
from campjournal.services import journal_service, sharing_service
from campjournal.services.journal_service import load_entry


async def count_drafts(db, user_id):
    result = await db.execute(
        select(func.count(JournalEntry.id)).where(
            JournalEntry.user_id == user_id,
            JournalEntry.status == STATUS_DRAFT,
        )
    )
    return result.scalar()


@pytest.fixture
async def shared_setup(make_user, make_campground, make_entry):
    alice = await make_user("alice")
    bob = await make_user("bob")
    campground = await make_campground("Arches Devils Garden")
    source = await make_entry(alice.id, campground.id, photos=2, notes="Windy night", video_url="https://video.test/1", is_favorite=True)
    return alice, bob, campground, source


@pytest.mark.asyncio
async def test_share_creates_draft_for_recipient(db, shared_setup):
    alice, bob, campground, source = shared_setup

    draft = await sharing_service.share_entry(db, source.id, bob.id, alice.id)

    assert draft.user_id == bob.id
    assert draft.status == STATUS_DRAFT
    assert draft.shared_from_user_id == alice.id
    assert draft.original_entry_id == source.id
    assert draft.campground_id == campground.id
    assert (draft.start_date, draft.end_date) == (source.start_date, source.end_date)
    assert draft.notes == "Windy night"
    assert draft.video_url == "https://video.test/1"
    assert draft.is_favorite is False
    assert draft.shared_from_profile.username == "alice"

    original = await load_entry(db, source.id)
    assert original.shared_with_user_id == bob.id
    assert original.shared_accepted is False


@pytest.mark.asyncio
async def test_share_copies_photo_rows_not_objects(db, shared_setup):
    alice, bob, _, source = shared_setup
    source_paths = sorted(p.storage_path for p in (await load_entry(db, source.id)).photos)

    draft = await sharing_service.share_entry(db, source.id, bob.id, alice.id)

    assert len(draft.photos) == 2
    assert all(p.user_id == bob.id for p in draft.photos)
    assert all(p.journal_entry_id == draft.id for p in draft.photos)
    assert sorted(p.storage_path for p in draft.photos) == source_paths

    # The source keeps its own rows
    original = await load_entry(db, source.id)
    assert len(original.photos) == 2


@pytest.mark.asyncio
async def test_share_twice_while_pending_is_rejected(db, shared_setup):
    alice, bob, _, source = shared_setup
    await sharing_service.share_entry(db, source.id, bob.id, alice.id)

    with pytest.raises(AlreadyExistsError):
        await sharing_service.share_entry(db, source.id, bob.id, alice.id)

    assert await count_drafts(db, bob.id) == 1


@pytest.mark.asyncio
async def test_share_again_after_accept(db, shared_setup):
    alice, bob, _, source = shared_setup
    draft = await sharing_service.share_entry(db, source.id, bob.id, alice.id)
    await sharing_service.accept_draft(db, draft.id, bob.id)

    second = await sharing_service.share_entry(db, source.id, bob.id, alice.id)

    assert second.id != draft.id
    assert await count_drafts(db, bob.id) == 1


@pytest.mark.asyncio
async def test_share_with_self_is_rejected(db, shared_setup):
    alice, _, _, source = shared_setup
    with pytest.raises(ValidationFailedError):
        await sharing_service.share_entry(db, source.id, alice.id, alice.id)


@pytest.mark.asyncio
async def test_share_requires_ownership_and_recipient(db, shared_setup, make_user):
    alice, bob, _, source = shared_setup
    carol = await make_user("carol")

    with pytest.raises(NotFoundError):
        await sharing_service.share_entry(db, source.id, carol.id, bob.id)

    with pytest.raises(NotFoundError):
        await sharing_service.share_entry(db, source.id, uuid.uuid4(), alice.id)

    with pytest.raises(NotFoundError):
        await sharing_service.share_entry(db, uuid.uuid4(), bob.id, alice.id)


@pytest.mark.asyncio
async def test_photo_copy_failure_keeps_draft_and_raises(db, shared_setup, monkeypatch):
    alice, bob, _, source = shared_setup
    alice_id, bob_id, source_id = alice.id, bob.id, source.id

    calls = []

    def flaky_photo(**kwargs):
        calls.append(kwargs)
        if len(calls) > 1:
            raise RuntimeError("photo insert failed")
        return Photo(**kwargs)

    monkeypatch.setattr(sharing_service, "Photo", flaky_photo)

    with pytest.raises(RuntimeError):
        await sharing_service.share_entry(db, source_id, bob_id, alice_id)

    drafts = await db.execute(
        select(JournalEntry.id).where(JournalEntry.user_id == bob_id, JournalEntry.status == STATUS_DRAFT)
    )
    draft_id = drafts.scalar_one()
    copied = await db.execute(select(func.count(Photo.id)).where(Photo.journal_entry_id == draft_id))
    assert copied.scalar() == 1

    original = await load_entry(db, source_id)
    assert original.shared_accepted is False


@pytest.mark.asyncio
async def test_accept_publishes_draft_and_marks_original(db, shared_setup):
    alice, bob, _, source = shared_setup
    draft = await sharing_service.share_entry(db, source.id, bob.id, alice.id)

    accepted = await sharing_service.accept_draft(db, draft.id, bob.id)

    assert accepted.id == draft.id
    assert accepted.status == STATUS_PUBLISHED
    original = await load_entry(db, source.id)
    assert original.shared_accepted is True


@pytest.mark.asyncio
async def test_accept_requires_pending_draft_owned_by_recipient(db, shared_setup):
    alice, bob, _, source = shared_setup
    draft = await sharing_service.share_entry(db, source.id, bob.id, alice.id)

    # Not the recipient
    with pytest.raises(NotFoundError):
        await sharing_service.accept_draft(db, draft.id, alice.id)

    # Published entries are not drafts
    with pytest.raises(NotFoundError):
        await sharing_service.accept_draft(db, source.id, alice.id)

    await sharing_service.accept_draft(db, draft.id, bob.id)
    with pytest.raises(NotFoundError):
        await sharing_service.accept_draft(db, draft.id, bob.id)


@pytest.mark.asyncio
async def test_accept_after_original_deleted(db, shared_setup):
    alice, bob, _, source = shared_setup
    draft = await sharing_service.share_entry(db, source.id, bob.id, alice.id)
    await journal_service.delete_journal_entry(db, source.id, alice.id)

    accepted = await sharing_service.accept_draft(db, draft.id, bob.id)

    assert accepted.status == STATUS_PUBLISHED
    assert accepted.original_entry_id is None


@pytest.mark.asyncio
async def test_accept_succeeds_when_marking_original_fails(db, shared_setup, monkeypatch):
    alice, bob, _, source = shared_setup
    draft = await sharing_service.share_entry(db, source.id, bob.id, alice.id)
    source_id = source.id
    original_get = db.get

    async def failing_get(model, ident, **kwargs):
        if model is JournalEntry and ident == source_id:
            raise ConnectionError("database went away")
        return await original_get(model, ident, **kwargs)

    monkeypatch.setattr(db, "get", failing_get)

    accepted = await sharing_service.accept_draft(db, draft.id, bob.id)

    assert accepted.status == STATUS_PUBLISHED
    original = await load_entry(db, source_id)
    assert original.shared_accepted is False


@pytest.mark.asyncio
async def test_reject_removes_draft_and_photo_rows(db, shared_setup):
    alice, bob, _, source = shared_setup
    draft = await sharing_service.share_entry(db, source.id, bob.id, alice.id)
    draft_id = draft.id

    await sharing_service.reject_draft(db, draft_id, bob.id)

    assert await load_entry(db, draft_id) is None
    photos = await db.execute(select(func.count(Photo.id)).where(Photo.journal_entry_id == draft_id))
    assert photos.scalar() == 0

    # Source photos are untouched
    original = await load_entry(db, source.id)
    assert len(original.photos) == 2

    with pytest.raises(NotFoundError):
        await sharing_service.reject_draft(db, draft_id, bob.id)


# --- API ---

@pytest.mark.asyncio
async def test_share_accept_over_http(client, auth, shared_setup):
    alice, bob, _, source = shared_setup

    response = await client.post(
        f"/api/v1/journal/{source.id}/share",
        json={"recipient_id": str(bob.id)},
        headers=auth(alice.id),
    )
    assert response.status_code == 201
    draft = response.json()
    assert draft["status"] == "draft"
    assert draft["shared_from_profile"]["username"] == "alice"
    assert len(draft["photos"]) == 2

    again = await client.post(
        f"/api/v1/journal/{source.id}/share",
        json={"recipient_id": str(bob.id)},
        headers=auth(alice.id),
    )
    assert again.status_code == 409

    # Drafts are private to the recipient
    peek = await client.get(f"/api/v1/journal/{draft['id']}", headers=auth(alice.id))
    assert peek.status_code == 404

    drafts = await client.get("/api/v1/journal", params={"status": "draft"}, headers=auth(bob.id))
    assert [d["id"] for d in drafts.json()] == [draft["id"]]

    accepted = await client.post(f"/api/v1/journal/{draft['id']}/accept", headers=auth(bob.id))
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "published"

    original = await client.get(f"/api/v1/journal/{source.id}", headers=auth(alice.id))
    assert original.json()["shared_accepted"] is True
    assert original.json()["shared_with_profile"]["username"] == "bob"


@pytest.mark.asyncio
async def test_reject_over_http(client, auth, shared_setup):
    alice, bob, _, source = shared_setup
    response = await client.post(
        f"/api/v1/journal/{source.id}/share",
        json={"recipient_id": str(bob.id)},
        headers=auth(alice.id),
    )
    draft_id = response.json()["id"]

    rejected = await client.post(f"/api/v1/journal/{draft_id}/reject", headers=auth(bob.id))
    assert rejected.status_code == 204

    again = await client.post(f"/api/v1/journal/{draft_id}/reject", headers=auth(bob.id))
    assert again.status_code == 404
    assert again.json()["detail"] == "Draft not found"


@pytest.mark.asyncio
async def test_share_with_self_over_http(client, auth, shared_setup):
    alice, _, _, source = shared_setup
    response = await client.post(
        f"/api/v1/journal/{source.id}/share",
        json={"recipient_id": str(alice.id)},
        headers=auth(alice.id),
    )
    assert response.status_code == 422
