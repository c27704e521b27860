"""
Test fixtures and configuration.
"""
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from morning_brief.main import app
from morning_brief.database import Base, get_db
from morning_brief.schemas.reasoning import SynthesisRequest
from morning_brief.services.synthesizer import BaseSynthesizer
from morning_brief.services.telemetry import TelemetrySink
from morning_brief.services.workspace import WorkspaceLocks

# In-memory test database shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"

T0 = datetime(2026, 2, 11, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, milliseconds: float = 0) -> None:
        self.now += timedelta(minutes=minutes, milliseconds=milliseconds)


class RecordingSink(TelemetrySink):
    """Telemetry sink that keeps records in memory."""

    def __init__(self):
        super().__init__()
        self.records: list[dict] = []

    def write(self, record: dict) -> None:
        self.records.append(record)

    def events(self, source: str) -> list[dict]:
        return [record for record in self.records if record["source"] == source]


class ScriptedSynthesizer(BaseSynthesizer):
    """Returns scripted candidates in order; exceptions in the script are raised."""

    name = "scripted"

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.requests: list[SynthesisRequest] = []

    async def invoke(self, request: SynthesisRequest) -> Any:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def build_candidate(
    confidence: str = "high",
    verification_prompt: str | None = None,
    rank: Any = 1,
    evidence_refs: tuple = ("e1",),
) -> dict:
    """A well-formed brief candidate as a model would return it."""
    priority = {
        "id": "p1",
        "rank": rank,
        "headline": "Clear release blockers",
        "summary": "Two pull requests are blocking the release.",
        "confidence": confidence,
        "evidence_refs": list(evidence_refs),
    }
    if verification_prompt is not None:
        priority["verification_prompt"] = verification_prompt
    return {
        "schema_version": "v0.2",
        "generated_at": "2026-02-11T08:00:00.000Z",
        "mission": {
            "title": "Ship the release",
            "rationale": "Blockers and failed deploys are rising.",
            "horizon": "today",
        },
        "priorities": [priority],
        "evidence": [
            {
                "id": "e1",
                "source": "github",
                "entity": "acme/app",
                "metric": "blockers",
                "value_text": "2 open",
                "observed_at": "2026-02-11T07:45:00.000Z",
                "freshness_minutes": 15,
            }
        ],
        "assumptions": [],
        "quick_reaction_prompt": "Accept, reframe, or snooze?",
    }


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def valid_candidate() -> dict:
    return build_candidate()


@pytest.fixture
def low_confidence_candidate() -> dict:
    return build_candidate(confidence="low", verification_prompt="Confirm blockers in GitHub")


@pytest.fixture
def invalid_candidate() -> dict:
    return build_candidate(rank=7, evidence_refs=("missing",))


@pytest_asyncio.fixture(scope="function")
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database override."""
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.state.workspace_locks = WorkspaceLocks()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
