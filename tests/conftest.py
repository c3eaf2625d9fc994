from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("LOG_FILE", os.devnull)
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("RESEND_API_KEY", "")

import uuid  # noqa: E402
from typing import Any, AsyncGenerator, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from pte_api.core.security import create_access_token, get_password_hash  # noqa: E402
from pte_api.db.deps import Base, get_db  # noqa: E402
from pte_api.db.seed.questions import MOCK_TEST, build_sample_questions  # noqa: E402
from pte_api.main import app as pte_app  # noqa: E402
from pte_api.models.pte_question import PteQuestion  # noqa: E402
from pte_api.models.pte_test import PteTest  # noqa: E402
from pte_api.models.user import User  # noqa: E402
from pte_api.schemas.scoring import HealthStatus, ProviderRawScore  # noqa: E402
from pte_api.services.ai_service.base import AIProvider, ProviderError  # noqa: E402
from pte_api.services.ai_service.orchestrator import (  # noqa: E402
    ScoringOrchestrator,
    get_scoring_orchestrator,
)
from pte_api.services.subscriptions import create_free_subscription  # noqa: E402
from pte_api.utils.enums import PteTestType, Role, Section  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Ensure pytest-anyio uses asyncio for all async tests."""
    return "asyncio"


class FakeProvider(AIProvider):
    """In-memory provider returning canned JSON; never touches the network."""

    def __init__(
        self,
        name: str = "fake",
        payloads: Optional[dict[str, dict]] = None,
        status: str = "available",
        fail: bool = False,
        supports_dialog: bool = True,
    ):
        self.name = name
        self.payloads = payloads or {}
        self.status = status
        self.fail = fail
        self.supports_dialog = supports_dialog
        self.calls: list[tuple[str, Any]] = []

    def health(self) -> HealthStatus:
        if self.status == "available":
            return HealthStatus(status="available")
        return HealthStatus(status=self.status, reason=f"{self.name} disabled")

    async def _score(self, kind: str, input: Any) -> ProviderRawScore:
        self.calls.append((kind, input))
        if self.fail:
            raise ProviderError(f"{self.name} exploded")
        data = dict(DEFAULT_PAYLOADS[kind])
        data.update(self.payloads.get(kind, {}))
        subscores = {k: v for k, v in data.items() if k not in ("overall", "rationale", "suggestions")}
        return ProviderRawScore(
            overall=data.get("overall"),
            subscores=subscores,
            rationale=data.get("rationale", f"{self.name} rationale"),
            suggestions=data.get("suggestions", [f"{self.name} suggestion"]),
            meta={"provider": self.name, "model": f"{self.name}-model"},
        )

    async def score_speaking(self, input):
        return await self._score("speaking", input)

    async def score_writing(self, input):
        return await self._score("writing", input)

    async def score_reading(self, input):
        return await self._score("reading", input)

    async def score_listening(self, input):
        return await self._score("listening", input)

    async def score_dialog(self, input):
        return await self._score("dialog", input)


DEFAULT_PAYLOADS: dict[str, dict] = {
    "speaking": {"content": 70, "pronunciation": 64, "fluency": 67, "overall": 67},
    "writing": {"content": 72, "form": 80, "grammar": 70, "vocabulary": 66, "overall": 71},
    "reading": {"overall": 0, "rationale": "Option B is supported by the second sentence."},
    "listening": {"overall": 0, "rationale": "The speaker says this near the end."},
    "dialog": {"appropriateness": 60, "politeness": 75, "relevance": 81, "overall": 72},
}


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def orchestrator(fake_provider: FakeProvider) -> ScoringOrchestrator:
    return ScoringOrchestrator([fake_provider], strategy="fallback")


@pytest.fixture()
async def engine(anyio_backend, tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_pte.sqlite'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


async def make_user(
    db: AsyncSession,
    email: str = "candidate@example.com",
    password: str = "Secret123!",
    role: Role = Role.student,
    verified: bool = True,
    daily_ai_credits: int = 4,
    with_subscription: bool = True,
) -> User:
    user = User(
        id=uuid.uuid4(),
        first_name="Ada",
        last_name="Obi",
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        is_email_verified=verified,
        daily_ai_credits=daily_ai_credits,
        ai_credits_used=0,
    )
    db.add(user)
    await db.commit()
    if with_subscription:
        await create_free_subscription(user, db)
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
async def user(db_session: AsyncSession) -> User:
    return await make_user(db_session)


@pytest.fixture()
async def admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, email="admin@example.com", role=Role.admin)


@pytest.fixture()
def test_app() -> FastAPI:
    return pte_app


@pytest.fixture()
async def client(
    test_app: FastAPI, db_session: AsyncSession, orchestrator: ScoringOrchestrator
) -> AsyncGenerator[AsyncClient, None]:
    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    test_app.dependency_overrides[get_db] = _get_test_db
    test_app.dependency_overrides[get_scoring_orchestrator] = lambda: orchestrator

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client

    test_app.dependency_overrides.clear()


@pytest.fixture()
async def mock_test(db_session: AsyncSession) -> PteTest:
    """Free mock test holding the sample questions, one per common task type."""
    test = PteTest(id=uuid.uuid4(), **MOCK_TEST)
    db_session.add(test)
    db_session.add_all(build_sample_questions(test.id))
    await db_session.commit()
    return test


@pytest.fixture()
async def premium_test(db_session: AsyncSession) -> PteTest:
    test = PteTest(
        id=uuid.uuid4(),
        title="Reading Section Test 2",
        test_type=PteTestType.section,
        section=Section.reading,
        is_premium=True,
        duration=30,
    )
    db_session.add(test)
    await db_session.commit()
    return test


async def question_of_type(db: AsyncSession, test: PteTest, question_type: str) -> PteQuestion:
    result = await db.execute(
        select(PteQuestion)
        .where(PteQuestion.test_id == test.id, PteQuestion.question_type == question_type)
        .order_by(PteQuestion.order_index)
    )
    return result.scalars().first()


@pytest.fixture()
async def premium_question(db_session: AsyncSession, premium_test: PteTest) -> PteQuestion:
    question = PteQuestion(
        id=uuid.uuid4(),
        test_id=premium_test.id,
        question="Which statement best summarises the passage?",
        question_type="reading_multiple_choice_single",
        section=Section.reading,
        question_data={
            "passage": "Urban gardens cut food miles and cool the streets around them.",
            "options": ["They cool streets", "They raise rents"],
        },
        correct_answer="They cool streets",
        points=1,
        order_index=0,
        tags=["weekly_prediction"],
        is_active=True,
    )
    db_session.add(question)
    await db_session.commit()
    return question
