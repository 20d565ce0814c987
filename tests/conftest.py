"""Shared fixtures for the subsidy matcher tests."""

import httpx
import pytest

from subsidy_matcher.ai.client import RefinementClient
from subsidy_matcher.ai.rate_limit import RateLimiter, reset_rate_limiters
from subsidy_matcher.db.models import Base
from subsidy_matcher.db.session import create_db_engine, make_session_factory
from subsidy_matcher.matching.schemas import CompanyProfile, SubsidyCandidate
from subsidy_matcher.settings import Settings


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def chat_completion(content: str, prompt_tokens: int = 120, completion_tokens: int = 40) -> dict:
    """Body of a successful chat completion."""
    return {
        "id": "cmpl-test",
        "object": "chat.completion",
        "created": 1_700_000_000,
        "model": "mistral-small-latest",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        },
    }


@pytest.fixture(autouse=True)
def _fresh_rate_limiters():
    reset_rate_limiters()
    yield
    reset_rate_limiters()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        ai_enabled=True,
        ai_api_key="test-key",
        ai_base_url="https://ai.test/v1",
        ai_tier="tier2",
        ai_min_delay_seconds=0,
        ai_max_limiter_wait_seconds=0,
        ai_timeout_seconds=5,
        default_match_limit=5,
    )


@pytest.fixture
def make_refinement_client(test_settings):
    """Factory: RefinementClient whose HTTP traffic goes to `handler`."""

    def factory(handler, config=None, limiter=None):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        limiter = limiter or RateLimiter(requests_per_minute=1000, tokens_per_minute=10_000_000)
        return RefinementClient(config or test_settings, http_client=http_client, limiter=limiter)

    return factory


@pytest.fixture
def session_factory():
    """In-memory SQLite database with all tables."""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def occitanie_farm():
    return CompanyProfile(
        id="profile-occ-farm",
        company_name="Ferme du Lauragais",
        sector="Agriculture",
        region="Occitanie",
        employees="1-10",
        annual_turnover=400_000,
        year_created=2015,
        legal_form="EARL",
        certifications=("Bio",),
        project_types=("innovation",),
    )


@pytest.fixture
def scenario_catalog():
    """Catalog for the Occitanie farm: one excluded, one weak, the rest eligible."""
    return [
        SubsidyCandidate(
            id="sub-music",
            title="Aide à la musique en Occitanie",
            regions=("Occitanie",),
            primary_sector="Culture",
            amount_max=5_000_000,
            agency="Région Occitanie",
        ),
        SubsidyCandidate(
            id="sub-occ-agri",
            title="Aide à l'installation agricole",
            regions=("Occitanie",),
            primary_sector="Agriculture",
            amount_max=50_000,
            agency="Région Occitanie",
        ),
        SubsidyCandidate(
            id="sub-national-bpi",
            title="Prêt innovation Bpifrance",
            regions=("National",),
            is_universal_sector=True,
            amount_max=2_000_000,
            agency="Bpifrance",
        ),
        SubsidyCandidate(
            id="sub-bretagne-peche",
            title="Aide pêche Bretagne",
            regions=("Bretagne",),
            primary_sector="Pêche",
        ),
        SubsidyCandidate(
            id="sub-eti-only",
            title="Accompagnement croissance",
            legal_entities=("ETI",),
        ),
    ]


@pytest.fixture
def agricultural_catalog():
    """Eight eligible Occitanie programmes with distinct amounts."""
    return [
        SubsidyCandidate(
            id=f"sub-agri-{n}",
            title=f"Programme agricole régional {n}",
            regions=("Occitanie",),
            primary_sector="Agriculture",
            amount_max=amount,
        )
        for n, amount in enumerate([20_000_000, 5_000_000, 2_000_000, 800_000, 600_000, 200_000, 150_000, 50_000])
    ]


@pytest.fixture
def completion_body():
    """Factory for chat completion response bodies."""
    return chat_completion


@pytest.fixture
def reference_catalog():
    """National agriculture aid, regional agriculture aid, arts programme, green loan."""
    return {
        "national_agri": SubsidyCandidate(
            id="sub-nat-agri-invest",
            title="Aide à l'investissement dans les exploitations agricoles",
            regions=("National",),
            primary_sector="Agriculture",
            amount_max=200_000,
        ),
        "regional_agri": SubsidyCandidate(
            id="sub-occ-agri-region",
            title="Aide régionale aux agriculteurs d'Occitanie",
            regions=("Occitanie",),
            primary_sector="Agriculture",
            amount_max=1_000_000,
            agency="Région Occitanie",
        ),
        "arts": SubsidyCandidate(
            id="sub-arts-musique",
            title="Soutien à la création musicale et au spectacle vivant",
            regions=("Occitanie",),
            primary_sector="Culture",
            amount_max=500_000,
        ),
        "green_loan": SubsidyCandidate(
            id="sub-pret-vert",
            title="Prêt vert pour la transition écologique",
            description="Pour les PME et ETI",
            regions=("National",),
            is_universal_sector=True,
            amount_max=15_000_000,
            agency="Bpifrance",
        ),
    }
