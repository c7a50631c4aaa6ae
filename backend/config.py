import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from models import Base
from supabase import create_client, Client

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./wastemarket.db")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_STORAGE_BUCKET = os.getenv("SUPABASE_STORAGE_BUCKET", "listing-media")
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-only-change-me")
JWT_ALGORITHM = "HS256"
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", 30))

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", 30))
AI_VERIFY_CONFIDENCE = float(os.getenv("AI_VERIFY_CONFIDENCE", 0.7))

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")


_supabase_admin_client = None

def get_supabase_admin_client() -> Client:
    global _supabase_admin_client
    if _supabase_admin_client is None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in environment variables")

        _supabase_admin_client = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)

    return _supabase_admin_client


def is_storage_configured() -> bool:
    return bool(SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY)


def build_async_url(database_url: str) -> str:
    """Normalize a DATABASE_URL into the async driver form used by the app"""
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    if database_url.startswith("postgresql://"):
        asyncpg_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    else:
        asyncpg_url = database_url

    if not asyncpg_url.startswith("postgresql+asyncpg://"):
        return asyncpg_url

    base_url = asyncpg_url.split("?")[0]
    return f"{base_url}?prepared_statement_cache_size=0"


def build_sync_url(database_url: str) -> str:
    """Sync driver URL for Alembic"""
    url = build_async_url(database_url).split("?prepared_statement_cache_size")[0]
    url = url.replace("postgresql+asyncpg://", "postgresql://")
    return url.replace("sqlite+aiosqlite://", "sqlite://")


def make_async_engine(database_url: str):
    url = build_async_url(database_url)
    if url.startswith("postgresql+asyncpg://"):
        return create_async_engine(
            url,
            echo=False,
            pool_pre_ping=False,
            pool_size=5,
            max_overflow=0
        )
    return create_async_engine(url, echo=False)


def make_session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async_engine = make_async_engine(DATABASE_URL)
AsyncSessionLocal = make_session_factory(async_engine)
sync_engine = None

async def get_db():
    async with AsyncSessionLocal() as session:
        yield session

def get_session_factory():
    """Session factory for work that outlives the request (background audits)"""
    return AsyncSessionLocal

async def init_db(engine=None):
    engine = engine or async_engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

def get_sync_engine():
    global sync_engine
    if sync_engine is None:
        sync_engine = create_engine(build_sync_url(DATABASE_URL))
    return sync_engine

ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
