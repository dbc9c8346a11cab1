"""
Tests for journal entries, the feed and map data.
"""
import uuid
from datetime import date

import pytest
from sqlalchemy import select, func

from campjournal.core.exceptions import NotFoundError, ValidationFailedError
from campjournal.models import Follow, Photo, STATUS_DRAFT, STATUS_PUBLISHED
from campjournal.schemas.journal import JournalEntryCreate, JournalEntryUpdate
from campjournal.services import journal_service


@pytest.mark.asyncio
async def test_create_entry(db, make_user, make_campground):
    alice = await make_user()
    campground = await make_campground("Valley of Fire")

    entry = await journal_service.create_journal_entry(db, alice.id, JournalEntryCreate(
        campground_id=campground.id,
        start_date=date(2024, 5, 1),
        end_date=date(2024, 5, 1),
        notes="Single night",
    ))

    assert entry.status == STATUS_PUBLISHED
    assert entry.campground.name == "Valley of Fire"
    assert entry.photos == []
    assert entry.shared_accepted is None


@pytest.mark.asyncio
async def test_create_entry_for_unknown_campground(db, make_user):
    alice = await make_user()
    with pytest.raises(NotFoundError):
        await journal_service.create_journal_entry(db, alice.id, JournalEntryCreate(
            campground_id=uuid.uuid4(),
            start_date=date(2024, 5, 1),
            end_date=date(2024, 5, 2),
        ))


def test_create_schema_rejects_reversed_dates():
    with pytest.raises(ValueError):
        JournalEntryCreate(campground_id=uuid.uuid4(), start_date=date(2024, 5, 2), end_date=date(2024, 5, 1))


@pytest.mark.asyncio
async def test_update_revalidates_merged_dates(db, make_user, make_campground, make_entry):
    alice = await make_user()
    campground = await make_campground()
    entry = await make_entry(alice.id, campground.id, start_date=date(2024, 6, 1), end_date=date(2024, 6, 3))

    with pytest.raises(ValidationFailedError):
        await journal_service.update_journal_entry(db, entry.id, alice.id, JournalEntryUpdate(end_date=date(2024, 5, 30)))

    updated = await journal_service.update_journal_entry(
        db, entry.id, alice.id, JournalEntryUpdate(end_date=date(2024, 6, 5), is_favorite=True)
    )
    assert updated.end_date == date(2024, 6, 5)
    assert updated.start_date == date(2024, 6, 1)
    assert updated.is_favorite is True


@pytest.mark.asyncio
async def test_update_ignores_null_dates(db, make_user, make_campground, make_entry):
    alice = await make_user()
    campground = await make_campground()
    entry = await make_entry(alice.id, campground.id, start_date=date(2024, 6, 1), end_date=date(2024, 6, 3))

    updated = await journal_service.update_journal_entry(
        db, entry.id, alice.id, JournalEntryUpdate(start_date=None, end_date=None, notes="Windy")
    )

    assert (updated.start_date, updated.end_date) == (date(2024, 6, 1), date(2024, 6, 3))
    assert updated.notes == "Windy"


@pytest.mark.asyncio
async def test_update_and_delete_are_owner_only(db, make_user, make_campground, make_entry):
    alice = await make_user()
    mallory = await make_user()
    campground = await make_campground()
    entry = await make_entry(alice.id, campground.id)

    with pytest.raises(NotFoundError):
        await journal_service.update_journal_entry(db, entry.id, mallory.id, JournalEntryUpdate(notes="mine now"))
    with pytest.raises(NotFoundError):
        await journal_service.delete_journal_entry(db, entry.id, mallory.id)


@pytest.mark.asyncio
async def test_delete_removes_photo_rows(db, make_user, make_campground, make_entry):
    alice = await make_user()
    campground = await make_campground()
    entry = await make_entry(alice.id, campground.id, photos=3)
    entry_id = entry.id

    await journal_service.delete_journal_entry(db, entry_id, alice.id)

    with pytest.raises(NotFoundError):
        await journal_service.get_journal_entry(db, entry_id)
    remaining = await db.execute(select(func.count(Photo.id)).where(Photo.journal_entry_id == entry_id))
    assert remaining.scalar() == 0


@pytest.mark.asyncio
async def test_list_entries_by_status_newest_first(db, make_user, make_campground, make_entry):
    alice = await make_user()
    campground = await make_campground()
    older = await make_entry(alice.id, campground.id, start_date=date(2023, 7, 1), end_date=date(2023, 7, 2))
    newer = await make_entry(alice.id, campground.id, start_date=date(2024, 7, 1), end_date=date(2024, 7, 2))
    draft = await make_entry(alice.id, campground.id, status=STATUS_DRAFT)

    everything = await journal_service.get_user_journal_entries(db, alice.id)
    assert [e.id for e in everything] == [newer.id, draft.id, older.id]

    published = await journal_service.get_user_journal_entries(db, alice.id, STATUS_PUBLISHED)
    assert [e.id for e in published] == [newer.id, older.id]

    drafts = await journal_service.get_user_journal_entries(db, alice.id, STATUS_DRAFT)
    assert [e.id for e in drafts] == [draft.id]

    with pytest.raises(ValidationFailedError):
        await journal_service.get_user_journal_entries(db, alice.id, "archived")


@pytest.mark.asyncio
async def test_feed_shows_published_entries_of_followed_users(db, make_user, make_campground, make_entry):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    campground = await make_campground()
    db.add(Follow(follower_id=alice.id, following_id=bob.id))
    await db.commit()

    first = await make_entry(bob.id, campground.id)
    second = await make_entry(bob.id, campground.id)
    await make_entry(bob.id, campground.id, status=STATUS_DRAFT)
    await make_entry(carol.id, campground.id)
    await make_entry(alice.id, campground.id)

    feed = await journal_service.get_feed_entries(db, alice.id)

    assert [e.id for e in feed] == [second.id, first.id]
    assert all(e.profile.username == "bob" for e in feed)


@pytest.mark.asyncio
async def test_visited_locations_one_marker_per_campground(db, make_user, make_campground, make_entry):
    alice = await make_user()
    arches = await make_campground("Arches", latitude=38.7, longitude=-109.6)
    zion = await make_campground("Zion", latitude=37.2, longitude=-112.9)
    nowhere = await make_campground("Unmapped", latitude=None, longitude=None)

    await make_entry(alice.id, arches.id, start_date=date(2023, 4, 1), end_date=date(2023, 4, 2))
    await make_entry(alice.id, arches.id, start_date=date(2024, 4, 1), end_date=date(2024, 4, 3), is_favorite=True)
    await make_entry(alice.id, zion.id)
    await make_entry(alice.id, zion.id, status=STATUS_DRAFT)
    await make_entry(alice.id, nowhere.id)

    markers = {m.name: m for m in await journal_service.get_visited_locations(db, alice.id)}

    assert set(markers) == {"Arches", "Zion"}
    assert markers["Arches"].visit_count == 2
    assert markers["Arches"].last_visited == date(2024, 4, 3)
    assert markers["Arches"].is_favorite is True
    assert markers["Zion"].visit_count == 1
    assert markers["Zion"].is_favorite is False


# --- API ---

@pytest.mark.asyncio
async def test_entry_crud_over_http(client, auth, make_user, make_campground):
    alice = await make_user()
    campground = await make_campground("Bryce Canyon")
    headers = auth(alice.id)

    created = await client.post("/api/v1/journal", json={
        "campground_id": str(campground.id),
        "start_date": "2024-08-10",
        "end_date": "2024-08-12",
        "notes": "Stars",
    }, headers=headers)
    assert created.status_code == 201
    entry = created.json()
    assert entry["campground"]["name"] == "Bryce Canyon"
    assert entry["profile"]["username"] == alice.username

    patched = await client.patch(f"/api/v1/journal/{entry['id']}", json={"notes": "So many stars"}, headers=headers)
    assert patched.json()["notes"] == "So many stars"

    bad = await client.patch(f"/api/v1/journal/{entry['id']}", json={"start_date": "2024-08-20"}, headers=headers)
    assert bad.status_code == 422

    nulls = await client.patch(f"/api/v1/journal/{entry['id']}", json={"start_date": None, "end_date": None}, headers=headers)
    assert nulls.status_code == 200
    assert (nulls.json()["start_date"], nulls.json()["end_date"]) == ("2024-08-10", "2024-08-12")

    listed = await client.get("/api/v1/journal", headers=headers)
    assert [e["id"] for e in listed.json()] == [entry["id"]]

    deleted = await client.delete(f"/api/v1/journal/{entry['id']}", headers=headers)
    assert deleted.status_code == 204

    gone = await client.get(f"/api/v1/journal/{entry['id']}", headers=headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_create_with_reversed_dates_over_http(client, auth, make_user, make_campground):
    alice = await make_user()
    campground = await make_campground()
    response = await client.post("/api/v1/journal", json={
        "campground_id": str(campground.id),
        "start_date": "2024-08-12",
        "end_date": "2024-08-10",
    }, headers=auth(alice.id))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_upload_entry_photos_skips_failures(client, auth, make_user, make_campground, make_entry, storage):
    alice = await make_user()
    campground = await make_campground()
    entry = await make_entry(alice.id, campground.id)

    response = await client.post(
        f"/api/v1/journal/{entry.id}/photos",
        files=[
            ("files", ("tent.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")),
            ("files", ("notes.txt", b"not an image", "text/plain")),
            ("files", ("fire.png", b"\x89PNGpng-bytes", "image/png")),
        ],
        headers=auth(alice.id),
    )

    assert response.status_code == 201
    photos = response.json()
    assert len(photos) == 2
    assert all(p["journal_entry_id"] == str(entry.id) for p in photos)
    assert len(storage.objects) == 2

    listed = await client.get(f"/api/v1/journal/{entry.id}/photos", headers=auth(alice.id))
    assert len(listed.json()) == 2


@pytest.mark.asyncio
async def test_upload_to_someone_elses_entry(client, auth, make_user, make_campground, make_entry):
    alice = await make_user()
    mallory = await make_user()
    campground = await make_campground()
    entry = await make_entry(alice.id, campground.id)

    response = await client.post(
        f"/api/v1/journal/{entry.id}/photos",
        files=[("files", ("x.jpg", b"\xff\xd8", "image/jpeg"))],
        headers=auth(mallory.id),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_feed_and_map_over_http(client, auth, make_user, make_campground, make_entry, db):
    alice = await make_user()
    bob = await make_user()
    campground = await make_campground("Canyonlands", latitude=38.3, longitude=-109.9)
    db.add(Follow(follower_id=alice.id, following_id=bob.id))
    await db.commit()
    entry = await make_entry(bob.id, campground.id)

    feed = await client.get("/api/v1/journal/feed", headers=auth(alice.id))
    assert [e["id"] for e in feed.json()] == [str(entry.id)]

    bob_map = await client.get("/api/v1/journal/map", headers=auth(bob.id))
    assert bob_map.json() == [{
        "campground_id": str(campground.id),
        "name": "Canyonlands",
        "latitude": 38.3,
        "longitude": -109.9,
        "visit_count": 1,
        "last_visited": "2024-06-03",
        "is_favorite": False,
    }]
