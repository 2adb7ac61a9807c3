"""Pydantic models for data validation and structure."""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from constants import CONTRACT_TYPE_ALIASES

Level = Literal["low", "medium", "high"]


class ContractType(str, Enum):
    """Closed set of contract categories shared by detection and analysis."""
    EMPLOYMENT = "Employment"
    SERVICE = "Service"
    LEASE = "Lease"
    NDA = "NDA"
    SALES = "Sales"
    CONSTRUCTION = "Construction"
    PARTNERSHIP = "Partnership"
    OTHER = "Other"

    @classmethod
    def labels(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["ContractType"]:
        """Strict lookup by value or known alias, ignoring case. Returns None when unknown."""
        if not label:
            return None
        key = label.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        alias = CONTRACT_TYPE_ALIASES.get(key)
        return cls(alias) if alias else None


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RiskItem(CamelModel):
    """A risk for the receiving party."""
    description: str = Field(description="Short description of the risk.")
    explanation: str = Field(default="", description="Why the contract creates this risk.")
    severity: Level = Field(description="The assessed severity.")


class OpportunityItem(CamelModel):
    """A benefit for the receiving party."""
    description: str = Field(description="Short description of the opportunity.")
    explanation: str = Field(default="", description="Which provision creates the opportunity.")
    impact: Level = Field(description="The assessed impact.")


class FinancialTerms(CamelModel):
    description: str = ""
    details: List[str] = Field(default_factory=list)


class Attachment(CamelModel):
    """The source file an analysis was produced from."""
    file_name: str
    file_url: str


class AnalysisResult(CamelModel):
    """Validated AI analysis of a contract, before provenance is attached."""
    risks: List[RiskItem]
    opportunities: List[OpportunityItem]
    summary: str
    recommendations: List[str] = Field(default_factory=list)
    key_clauses: List[str] = Field(default_factory=list)
    legal_compliance: str = ""
    negotiation_points: List[str] = Field(default_factory=list)
    contract_duration: str = ""
    termination_conditions: str = ""
    overall_score: int = Field(ge=0, le=100)
    language: str = "en"
    ai_model: str = ""
    financial_terms: FinancialTerms = Field(default_factory=FinancialTerms)
    performance_metrics: List[str] = Field(default_factory=list)
    specific_clauses: str = ""

    @field_validator("summary")
    @classmethod
    def summary_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("summary must not be empty")
        return value


class ContractAnalysisRecord(AnalysisResult):
    """A persisted contract analysis with its provenance."""
    id: str
    user_id: str
    contract_type: ContractType
    contract_text: str
    attachments: List[Attachment]
    created_at: datetime


class OwnedContractAnalysis(ContractAnalysisRecord):
    """A persisted analysis enriched with the owner's display name."""
    owner_name: str = "Unknown"
