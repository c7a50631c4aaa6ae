"""Shared fixtures: a fresh SQLite database per test and an HTTP client bound to it."""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from config import get_db, get_session_factory, init_db, make_async_engine, make_session_factory
from main import app
from models import Listing, User
from routers.auth.helpers import auth_helpers
from routers.bids.helpers import BiddingHelpers, get_bidding
from utils.ai_assist import get_ai_assist
from utils.exceptions import ExternalServiceError

PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="


class FakeAIAssist:
    """In-memory stand-in for the Gemini client"""

    def __init__(self, enabled=True):
        self.enabled = enabled
        self.audit_verdict = {"is_verified": True, "notes": "Material matches description.", "confidence": 0.9}
        self.suggestion = {"category": "Plastic", "confidence": 0.8, "reasoning": "Clear PET bottles"}
        self.error = None
        self.audit_calls = []
        self.suggest_calls = []

    async def audit_listing(self, title, description, category, quality, image_data):
        self.audit_calls.append({"title": title, "category": category, "image_data": image_data})
        if self.error:
            raise self.error
        return dict(self.audit_verdict)

    async def suggest_category(self, image_data):
        self.suggest_calls.append(image_data)
        if self.error:
            raise self.error
        return dict(self.suggestion)

    def fail_with(self, message="AI request timed out after 30s"):
        self.error = ExternalServiceError(message)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Create tables in a throwaway database file."""
    engine = make_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()

@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)

@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session

@pytest.fixture
def fake_ai():
    return FakeAIAssist()

@pytest.fixture
def bidding():
    return BiddingHelpers()

@pytest_asyncio.fixture
async def client(session_factory, fake_ai, bidding):
    """HTTP client with the database, AI and bidding dependencies overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_ai_assist] = lambda: fake_ai
    app.dependency_overrides[get_bidding] = lambda: bidding

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

@pytest.fixture
def make_user(session_factory):
    """Insert a user directly; returns the refreshed row."""
    counter = {"n": 0}

    async def _make_user(role="buyer", **fields):
        counter["n"] += 1
        values = {
            "email": f"{role}{counter['n']}@example.com",
            "password": "secret",
            "first_name": f"{role.title()}{counter['n']}",
            "role": role,
        }
        values.update(fields)
        async with session_factory() as session:
            user = User(**values)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make_user

@pytest.fixture
def make_listing(session_factory):
    """Insert a listing directly; defaults to an active auction starting at 450."""

    async def _make_listing(seller, **fields):
        values = {
            "seller_id": seller.id,
            "title": "PET Flakes",
            "description": "Clean PET flakes",
            "category": "Plastic",
            "quality": "Sorted/Clean",
            "price_type": "bidding",
            "price": 450,
            "quantity": "500kg",
        }
        values.update(fields)
        async with session_factory() as session:
            listing = Listing(**values)
            session.add(listing)
            await session.commit()
            await session.refresh(listing)
            return listing

    return _make_listing

@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {auth_helpers.create_access_token(user)}"}
    return _auth_headers
