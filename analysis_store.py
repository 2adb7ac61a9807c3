"""
Persistence of contract analyses with their provenance.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database import SessionLocal, session_scope
from errors import StorageError
from models import ContractAnalysis, User, generate_id
from schemas import AnalysisResult, Attachment, ContractAnalysisRecord, ContractType, OwnedContractAnalysis

logger = logging.getLogger(__name__)

UNKNOWN_OWNER = "Unknown"

UserLookup = Callable[[str], Optional[str]]


def _record_from_row(row: ContractAnalysis) -> ContractAnalysisRecord:
    created_at = row.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    data = {
        "id": row.id,
        "created_at": created_at,
        "user_id": row.user_id,
        "contract_type": row.contract_type,
        "contract_text": row.contract_text,
        "attachments": row.attachments,
        "risks": row.risks,
        "opportunities": row.opportunities,
        "summary": row.summary,
        "recommendations": row.recommendations,
        "key_clauses": row.key_clauses,
        "legal_compliance": row.legal_compliance or "",
        "negotiation_points": row.negotiation_points,
        "contract_duration": row.contract_duration or "",
        "termination_conditions": row.termination_conditions or "",
        "overall_score": row.overall_score,
        "language": row.language or "en",
        "ai_model": row.ai_model or "",
        "financial_terms": row.financial_terms or {},
        "performance_metrics": row.performance_metrics,
        "specific_clauses": row.specific_clauses or "",
    }
    return ContractAnalysisRecord.model_validate(data)


class AnalysisStore:
    """Write-once store of contract analyses.

    Records are created in a single transaction and never updated here.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal, user_lookup: Optional[UserLookup] = None):
        self._session_factory = session_factory
        self._user_lookup = user_lookup or self._lookup_username

    def save(self, user_id: str, contract_type: ContractType, contract_text: str,
             attachment: Attachment, analysis: AnalysisResult) -> ContractAnalysisRecord:
        """Persist one analysis with its provenance and return the stored record."""
        if not contract_text or not contract_text.strip():
            raise StorageError("Refusing to store an analysis without contract text.", retryable=False)

        row = ContractAnalysis(
            id=generate_id(),
            created_at=datetime.now(timezone.utc),
            user_id=user_id,
            contract_type=ContractType(contract_type).value,
            contract_text=contract_text,
            attachments=[attachment.model_dump(by_alias=True)],
            **analysis.model_dump(mode="json"),
        )
        try:
            with session_scope(self._session_factory) as session:
                session.add(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store analysis for user {user_id} ({attachment.file_url}): {str(e)}")
            raise StorageError("The analysis could not be saved.", source=attachment.file_url) from e

        logger.info(f"Stored contract analysis {row.id} for user {user_id}")
        return _record_from_row(row)

    def find_by_id(self, analysis_id: str) -> Optional[ContractAnalysisRecord]:
        try:
            with session_scope(self._session_factory) as session:
                row = session.get(ContractAnalysis, analysis_id)
                return _record_from_row(row) if row else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load analysis {analysis_id}: {str(e)}")
            raise StorageError("The analysis could not be loaded.") from e

    def find_by_owner(self, user_id: str) -> List[ContractAnalysisRecord]:
        statement = (
            select(ContractAnalysis)
            .where(ContractAnalysis.user_id == user_id)
            .order_by(ContractAnalysis.created_at.desc())
        )
        return self._fetch(statement)

    def list_with_owner_names(self) -> List[OwnedContractAnalysis]:
        """All analyses, each with the owner's display name when it can be resolved."""
        records = self._fetch(select(ContractAnalysis).order_by(ContractAnalysis.created_at.desc()))
        names = {}
        results = []
        for record in records:
            if record.user_id not in names:
                names[record.user_id] = self._owner_name(record.user_id)
            results.append(OwnedContractAnalysis(**record.model_dump(), owner_name=names[record.user_id]))
        return results

    def _fetch(self, statement) -> List[ContractAnalysisRecord]:
        try:
            with session_scope(self._session_factory) as session:
                return [_record_from_row(row) for row in session.scalars(statement)]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list analyses: {str(e)}")
            raise StorageError("The analyses could not be loaded.") from e

    def _owner_name(self, user_id: str) -> str:
        try:
            name = self._user_lookup(user_id)
        except Exception as e:
            logger.warning(f"Could not resolve display name for user {user_id}: {str(e)}")
            return UNKNOWN_OWNER
        if not name:
            logger.warning(f"No display name found for user {user_id}")
            return UNKNOWN_OWNER
        return name

    def _lookup_username(self, user_id: str) -> Optional[str]:
        with session_scope(self._session_factory) as session:
            user = session.get(User, user_id)
            return user.username if user else None
