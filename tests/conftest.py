"""Shared test fixtures."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock

import pytest

from resume_pipeline.clients.llm_client import LLMClient, LLMResponse
from resume_pipeline.matching.engine import MatchingEngine
from resume_pipeline.matching.scorers import TagOverlapScorer
from resume_pipeline.models.context import RequestContext
from resume_pipeline.models.library import (
    Accomplishment,
    ContactDetails,
    Education,
    LibraryEntry,
    Role,
    Skill,
)
from resume_pipeline.models.match import RankedMatch
from resume_pipeline.models.profile import SuccessProfile
from resume_pipeline.pipeline.orchestrator import ResumePipeline
from resume_pipeline.storage.library_store import LibraryStore
from resume_pipeline.storage.resume_store import ResumeStore


def make_accomplishment(id: str = "a1", tags: list[str] | None = None, **kwargs) -> Accomplishment:
    fields = {
        "company": "Acme",
        "title": "Engineer",
        "location": "Remote",
        "start_date": date(2020, 1, 1),
        "text": f"Accomplishment {id}",
    }
    fields.update(kwargs)
    return Accomplishment(id=id, tags=tags if tags is not None else ["python"], **fields)


def make_match(id: str = "a1", score: int = 80, **kwargs) -> RankedMatch:
    fields = {
        "text": f"Did thing {id}",
        "company": "Acme",
        "title": "Engineer",
        "location": "Remote",
        "start_date": "01/2020",
        "matched_requirements": [],
    }
    fields.update(kwargs)
    return RankedMatch(item_id=id, score=score, **fields)


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(user_id="user-1")


@pytest.fixture
def sample_profile() -> SuccessProfile:
    return SuccessProfile(
        company="Globex",
        role="Backend Engineer",
        must_have=["Python", "Kubernetes"],
        nice_to_have=["Go"],
        key_themes=[
            {"theme": "Python", "tags": ["python", "django", "api"]},
            {"theme": "Kubernetes", "tags": ["kubernetes", "docker"]},
        ],
    )


@pytest.fixture
def sample_contact() -> ContactDetails:
    return ContactDetails(
        full_name="Jane Doe",
        email="jane@x.com",
        phone="(555) 123-4567",
        location="Austin, TX",
        linkedin_url="linkedin.com/in/janedoe",
        github_url="github.com/janedoe",
    )


@pytest.fixture
def sample_skills() -> list[Skill]:
    return [
        Skill(name="Python", category="Languages"),
        Skill(name="Go", category="Languages"),
        Skill(name="Docker", category="Tools"),
        Skill(name="Mentoring"),
    ]


@pytest.fixture
def sample_education() -> list[Education]:
    return [
        Education(
            institution="State University",
            degree="B.S. Computer Science",
            location="Austin, TX",
            end_date=date(2016, 5, 1),
            gpa="3.8",
        ),
    ]


@pytest.fixture
def sample_library() -> dict:
    """Library in the import file shape."""
    return {
        "contact": {"full_name": "Jane Doe", "email": "jane@x.com", "phone": "(555) 123-4567"},
        "summary": "Backend engineer focused on APIs.",
        "roles": [
            {
                "id": "r-acme",
                "company": "Acme",
                "title": "Senior Engineer",
                "location": "Remote",
                "start_date": "2020-01-01",
                "summary": "Platform team lead.",
                "accomplishments": [
                    {"id": "a-api", "text": "Built a Python API serving 1M requests/day", "tags": ["python", "api"]},
                    {"id": "a-k8s", "text": "Moved services to Kubernetes", "tags": ["kubernetes", "docker"]},
                ],
            },
            {
                "id": "r-init",
                "company": "Initech",
                "title": "Engineer",
                "start_date": "2016-06-01",
                "end_date": "2019-12-01",
                "accomplishments": [
                    {"id": "a-rpt", "text": "Automated TPS reports", "tags": ["reporting"]},
                ],
            },
        ],
        "library_entries": [
            {"id": "e-oss", "type": "project", "title": "pyfoo", "subtitle": "Open source",
             "date": "2022", "bullets": ["Django plugin with 2k stars"], "tags": ["python", "django"]},
            {"id": "e-untagged", "type": "award", "title": "Hackathon winner"},
        ],
        "skills": [{"name": "Python", "category": "Languages"}, "Docker"],
        "education": [
            {"institution": "State University", "degree": "B.S. Computer Science",
             "end_date": "2016-05-01"},
        ],
    }


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value={})
    return client


@pytest.fixture
def library_store(tmp_path) -> LibraryStore:
    return LibraryStore(tmp_path / "library.db")


@pytest.fixture
def resume_store(tmp_path) -> ResumeStore:
    return ResumeStore(tmp_path / "library.db")


@pytest.fixture
def pipeline(library_store, resume_store, tmp_path) -> ResumePipeline:
    return ResumePipeline(
        library_store,
        resume_store,
        MatchingEngine(TagOverlapScorer()),
        output_dir=tmp_path / "public" / "resumes",
        public_root="/resumes",
    )


@pytest.fixture
def role_with_accomplishments() -> Role:
    return Role(
        id="r1",
        company="Acme",
        title="Engineer",
        start_date=date(2020, 1, 1),
        accomplishments=[make_accomplishment("a1"), make_accomplishment("a2", tags=["go"])],
    )


@pytest.fixture
def tagged_entry() -> LibraryEntry:
    return LibraryEntry(id="e1", type="project", title="pyfoo", subtitle="Open source", tags=["python"])
