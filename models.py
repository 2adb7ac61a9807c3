from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from database import Base


def generate_id() -> str:
    return uuid4().hex


class ContractAnalysis(Base):
    __tablename__ = "contract_analyses"
    __table_args__ = (
        CheckConstraint("overall_score >= 0 AND overall_score <= 100", name="ck_contract_analyses_score"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Provenance
    user_id: Mapped[str] = mapped_column(String(120), index=True, nullable=False)
    contract_type: Mapped[str] = mapped_column(String(50), nullable=False)
    contract_text: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list] = mapped_column(JSON, nullable=False)

    # Analysis
    risks: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    opportunities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    recommendations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    key_clauses: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    legal_compliance: Mapped[str] = mapped_column(Text, default="")
    negotiation_points: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    contract_duration: Mapped[str] = mapped_column(Text, default="")
    termination_conditions: Mapped[str] = mapped_column(Text, default="")
    overall_score: Mapped[int] = mapped_column(Integer, nullable=False)
    language: Mapped[str] = mapped_column(String(10), default="en")
    ai_model: Mapped[str] = mapped_column(String(120), default="")
    financial_terms: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    performance_metrics: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    specific_clauses: Mapped[str] = mapped_column(Text, default="")


class User(Base):
    """Display names of application users, keyed by the identity provider's id."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(120), primary_key=True)
    username: Mapped[str] = mapped_column(String(120), nullable=False)
