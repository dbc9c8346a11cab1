"""
Pytest configuration and fixtures.
"""
import os
import tempfile

# Settings are read at import time; configure before importing the app.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_SCHEMA"] = ""
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["STORAGE_PROVIDER"] = "local"
os.environ["LOCAL_STORAGE_PATH"] = tempfile.mkdtemp(prefix="campjournal-test-")
os.environ["GOOGLE_MAPS_API_KEY"] = "test-key"

import itertools
import uuid
from datetime import date
from typing import Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.pool import StaticPool

from campjournal.core.database import Database
from campjournal.core.exceptions import NotFoundError
from campjournal.core.security import create_access_token
from campjournal.main import app
from campjournal.models import Campground, JournalEntry, Photo, Profile, User
from campjournal.schemas.campground import PlaceDetails, PlaceResult
from campjournal.services.storage_factory import get_default_storage


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

_counter = itertools.count(1)


class FakeStorage:
    """In-memory StorageInterface."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_uploads = False

    def upload_bytes(self, data_bytes, bucket, key, content_type="application/octet-stream", upsert=False):
        if self.fail_uploads:
            raise ConnectionError("storage unavailable")
        name = f"{bucket}/{key}"
        if name in self.objects and not upsert:
            raise FileExistsError(name)
        self.objects[name] = data_bytes
        return {"file_id": key, "size": len(data_bytes)}

    def get_public_url(self, bucket, key):
        return f"https://cdn.test/{bucket}/{key}"

    def delete_file(self, bucket, key):
        name = f"{bucket}/{key}"
        self.objects.pop(name, None)
        self.deleted.append(name)

    def file_exists(self, bucket, key):
        return f"{bucket}/{key}" in self.objects


class FakePlaces:
    """Stands in for PlacesClient; serves canned place details."""

    def __init__(self):
        self.details: Dict[str, PlaceDetails] = {}
        self.lookups: List[str] = []

    def add(self, place_id: str, name: str, latitude: Optional[float] = None, longitude: Optional[float] = None):
        self.details[place_id] = PlaceDetails(
            place_id=place_id,
            name=name,
            formatted_address=f"1 Trail Rd, {name}",
            latitude=latitude,
            longitude=longitude,
            city="Moab",
            state="UT",
            country="United States",
        )

    async def search_campgrounds(self, query: str) -> List[PlaceResult]:
        q = query.lower()
        return [PlaceResult(**d.model_dump(include=set(PlaceResult.model_fields))) for d in self.details.values() if q in d.name.lower()]

    async def get_place_details(self, place_id: str) -> PlaceDetails:
        self.lookups.append(place_id)
        if place_id not in self.details:
            raise NotFoundError(f"Place {place_id} not found")
        return self.details[place_id]

    async def aclose(self):
        pass


@pytest.fixture
async def database():
    """Fresh in-memory database per test."""
    database = Database(TEST_DATABASE_URL, poolclass=StaticPool)
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
async def db(database):
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def places():
    return FakePlaces()


@pytest.fixture
async def client(database, storage, places):
    """HTTP client against the app, wired to the test database and fakes."""
    app.state.db = database
    app.state.places = places
    app.dependency_overrides[get_default_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a user with a profile directly in the database."""
    async def _make_user(username: str = None, full_name: str = None) -> Profile:
        n = next(_counter)
        username = username or f"camper{n}"
        user = User(email=f"{username}@example.com", password_hash="not-a-real-hash")
        db.add(user)
        await db.flush()
        profile = Profile(id=user.user_id, username=username, full_name=full_name or username.title())
        db.add(profile)
        await db.commit()
        return profile
    return _make_user


@pytest.fixture
def make_campground(db):
    async def _make_campground(name: str = None, latitude: Optional[float] = 38.57, longitude: Optional[float] = -109.55) -> Campground:
        n = next(_counter)
        campground = Campground(
            google_place_id=f"place-{n}",
            name=name or f"Campground {n}",
            latitude=latitude,
            longitude=longitude,
        )
        db.add(campground)
        await db.commit()
        return campground
    return _make_campground


@pytest.fixture
def make_entry(db):
    async def _make_entry(
        user_id: uuid.UUID,
        campground_id: uuid.UUID,
        start_date: date = date(2024, 6, 1),
        end_date: date = date(2024, 6, 3),
        photos: int = 0,
        **fields,
    ) -> JournalEntry:
        entry = JournalEntry(
            user_id=user_id,
            campground_id=campground_id,
            start_date=start_date,
            end_date=end_date,
            **fields,
        )
        db.add(entry)
        await db.flush()
        for i in range(photos):
            path = f"{user_id}/{campground_id}/{entry.id}-{i}.jpg"
            db.add(Photo(
                user_id=user_id,
                campground_id=campground_id,
                journal_entry_id=entry.id,
                storage_path=path,
                public_url=f"https://cdn.test/campground-photos/{path}",
            ))
        await db.commit()
        return entry
    return _make_entry


def auth_headers(user_id: uuid.UUID) -> dict:
    token = create_access_token(data={"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth():
    return auth_headers


@pytest.fixture
def read_session(database):
    """
    Sessionmaker for assertions in API tests. Use it as a context manager so
    the transaction is closed before the next request.
    """
    return database.sessionmaker
