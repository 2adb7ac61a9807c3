"""Pytest configuration and fixtures."""

import json
import os

# Keep the application's default engine off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import List

import fitz  # PyMuPDF
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from pydantic import Field

from analysis_store import AnalysisStore
from database import build_engine, build_session_factory, init_db


class RecordingChatModel(FakeListChatModel):
    """Fake chat model that remembers every prompt it was sent."""
    prompts: List[str] = Field(default_factory=list)

    def _call(self, messages, *args, **kwargs):
        self.prompts.append(messages[-1].content)
        return super()._call(messages, *args, **kwargs)


class UnreachableChatModel(FakeListChatModel):
    """Fake chat model whose backend cannot be reached."""
    responses: List[str] = Field(default_factory=lambda: [""])
    prompts: List[str] = Field(default_factory=list)

    def _call(self, messages, *args, **kwargs):
        self.prompts.append(messages[-1].content)
        raise ConnectionError("connection refused")


def sample_analysis(**overrides):
    """A well-formed analysis reply as the AI backend would send it."""
    reply = {
        "risks": [
            {"description": "Unpaid overtime", "explanation": "Clause 4 caps paid hours at 40.", "severity": "high"},
            {"description": "Broad non-compete", "explanation": "Clause 9 applies for two years.", "severity": "medium"},
        ],
        "opportunities": [
            {"description": "Annual bonus", "explanation": "Clause 6 grants a 10% target bonus.", "impact": "medium"},
        ],
        "summary": "A full-time employment contract for a site engineer.",
        "recommendations": ["Negotiate overtime pay"],
        "keyClauses": ["Working hours", "Compensation"],
        "legalCompliance": "Consistent with standard labour law.",
        "negotiationPoints": ["Shorter non-compete"],
        "contractDuration": "Indefinite",
        "terminationConditions": "30 days written notice by either party.",
        "financialTerms": {"description": "Monthly salary", "details": ["$5,000 per month"]},
        "performanceMetrics": ["Project milestones met on time"],
        "specificClauses": "Intellectual property assigned to employer (Clause 8).",
        "overallScore": 72,
        "language": "en",
    }
    reply.update(overrides)
    return reply


def analysis_json(**overrides):
    return json.dumps(sample_analysis(**overrides))


@pytest.fixture
def make_pdf(tmp_path):
    """Build a PDF with one page per entry; an empty entry gives a page without text."""
    def _make(pages, name="contract.pdf"):
        doc = fitz.open()
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text)
        path = tmp_path / name
        doc.save(str(path))
        doc.close()
        return str(path)

    return _make


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'analyses.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return AnalysisStore(session_factory=session_factory)


@pytest.fixture
def analysis_llm():
    return RecordingChatModel(responses=[analysis_json()])


@pytest.fixture
def detection_llm():
    return RecordingChatModel(responses=["Lease"])
