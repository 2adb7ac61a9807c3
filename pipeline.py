"""
Contract analysis pipeline: extract -> detect type (when absent) -> analyze -> store.
"""
import logging
from typing import Callable, Optional, Union

import ai_processor
from analysis_store import AnalysisStore
from errors import InputError, PipelineError
from pdf_extractor import extract_text
from schemas import Attachment, ContractAnalysisRecord, ContractType
from utils import file_name_from_url

logger = logging.getLogger(__name__)


class ContractPipeline:
    """Runs the analysis stages in order for one document.

    Every stage fails fast. A failure stops the run before any later
    external call, and nothing is stored unless every stage succeeded.
    """

    def __init__(self, store: AnalysisStore, detection_llm=None, analysis_llm=None,
                 model_name: Optional[str] = None, extractor: Callable[[str], str] = extract_text):
        self.store = store
        self.detection_llm = detection_llm
        self.analysis_llm = analysis_llm
        self.model_name = model_name
        self.extractor = extractor

    def detect(self, file_url: str) -> ContractType:
        """Detect the contract type of a document without analyzing or storing it."""
        if not file_url or not str(file_url).strip():
            raise InputError("A file URL is required.")
        try:
            text = self.extractor(file_url)
            return ai_processor.detect_type(text, llm=self.detection_llm)
        except PipelineError as e:
            self._log_failure(e, file_url)
            raise

    def run(self, file_url: str, user_id: str,
            contract_type: Optional[Union[str, ContractType]] = None) -> ContractAnalysisRecord:
        """Analyze the document at ``file_url`` for ``user_id`` and persist the result."""
        requested_type = self._validate_request(file_url, user_id, contract_type)
        logger.info(f"Starting contract analysis of {file_url} for user {user_id}")

        try:
            text = self.extractor(file_url)

            if requested_type is None:
                resolved_type = ai_processor.detect_type(text, llm=self.detection_llm)
            else:
                resolved_type = requested_type

            analysis = ai_processor.analyze(
                text, resolved_type, llm=self.analysis_llm, model_name=self.model_name
            )

            attachment = Attachment(file_name=file_name_from_url(file_url), file_url=file_url)
            record = self.store.save(user_id, resolved_type, text, attachment, analysis)
        except PipelineError as e:
            self._log_failure(e, file_url)
            raise

        logger.info(f"Contract analysis {record.id} completed for {file_url} ({resolved_type.value}, score {record.overall_score})")
        return record

    @staticmethod
    def _validate_request(file_url, user_id, contract_type) -> Optional[ContractType]:
        if not file_url or not str(file_url).strip():
            raise InputError("A file URL is required.")
        if not user_id or not str(user_id).strip():
            raise InputError("A user id is required.")
        if contract_type is None or (isinstance(contract_type, str) and not contract_type.strip()):
            return None
        if isinstance(contract_type, ContractType):
            return contract_type
        resolved = ContractType.from_label(contract_type)
        if resolved is None:
            raise InputError(
                f"Unknown contract type '{contract_type}'. Expected one of: {', '.join(ContractType.labels())}."
            )
        return resolved

    @staticmethod
    def _log_failure(error: PipelineError, file_url: str) -> None:
        error.source = error.source or file_url
        logger.error(
            f"Contract pipeline failed at stage '{error.stage}' for {file_url}: {error.message}",
            exc_info=error.__cause__ is not None,
        )
