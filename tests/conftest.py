import json
import os
import tempfile

# Point the app at a throwaway database before anything imports core.config.
_TMP_DIR = tempfile.mkdtemp(prefix="paincompass-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["ANTHROPIC_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from database.session import engine  # noqa: E402
from main import app  # noqa: E402
from models.base import Base  # noqa: E402
from services.llm_client import get_llm_client  # noqa: E402
from services.rate_limiter import RateLimiter  # noqa: E402

ANALYSIS_REPLY = {
    "summary": "It sounds like your knee has been giving you a hard time on the stairs.",
    "urgency": "high",
    "understandingWhatsHappening": "Tendons around the kneecap can become irritated by sudden load increases.",
    "reassurance": {"title": "A Silver Lining", "message": "Tendon pain responds well to graded loading."},
    "possibleConditions": [
        {"name": "Patellar tendinopathy", "likelihood": "Likely", "description": "Irritated tendon below the kneecap."}
    ],
    "watchFor": ["Swelling that does not settle"],
    "recoveryPrinciples": ["Load the tendon gradually"],
    "avoid": ["Deep squats while it is flared"],
    "safeToTry": ["Isometric wall sits"],
    "timeline": "Most people improve over 6 to 12 weeks.",
    "resources": [{"name": "Dr. Robert LaPrade", "type": "Expert", "why": "Knee specialist"}],
}


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLLM:
    """Stands in for LLMClient; records prompts and returns a canned reply."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def complete(self, prompt: str, max_tokens: int, system: str | None = None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_llm():
    return FakeLLM(reply=json.dumps(ANALYSIS_REPLY))


@pytest.fixture
def client(fake_llm, clock):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    with TestClient(app) as c:
        app.state.rate_limiter = RateLimiter(minute_limit=2, daily_limit=30, clock=clock)
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def form_data():
    return {
        "painLevel": 8,
        "painTypes": ["Sharp"],
        "frequency": "Daily",
        "duration": "2-4 weeks",
        "story": "Started after I doubled my running distance.",
        "goals": "Run a half marathon",
    }
