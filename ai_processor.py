import difflib
import json
import logging
import math
import re
from functools import lru_cache
from typing import Any, Dict, Optional

from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

# Import configuration
from config import (
    OPENAI_API_KEY, AI_MODEL, DETECTION_TEMPERATURE, ANALYSIS_TEMPERATURE,
    CLASSIFIER_MAX_CHARS, DEFAULT_LANGUAGE
)
from constants import (
    CONTRACT_TYPE_ALIASES, LEVEL_ALIASES,
    CONTRACT_TYPE_PROMPT_TEMPLATE, ANALYSIS_PROMPT_TEMPLATE
)
from errors import AnalysisSchemaError, BackendUnavailableError, ClassificationError
from schemas import AnalysisResult, ContractType
from utils import message_text, parse_json_response

logger = logging.getLogger(__name__)

# Keys of the analysis reply that hold lists of strings / plain text
STRING_LIST_FIELDS = ("recommendations", "keyClauses", "negotiationPoints", "performanceMetrics")
TEXT_FIELDS = ("legalCompliance", "contractDuration", "terminationConditions", "specificClauses", "language")

_LABEL_NOISE = re.compile(r"^(the\s+)?(contract\s+type|type|label|answer)\s*[:\-]\s*", re.IGNORECASE)
_SCORE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:/\s*100)?\s*$")

# --- INITIALIZATION ---
# Models are built once per process on first use, so importing this module
# does not require an API key.

@lru_cache(maxsize=None)
def get_detection_llm():
    return ChatOpenAI(
        openai_api_key=OPENAI_API_KEY,
        model=AI_MODEL,
        temperature=DETECTION_TEMPERATURE,
        max_retries=0,
    )


@lru_cache(maxsize=None)
def get_analysis_llm():
    return ChatOpenAI(
        openai_api_key=OPENAI_API_KEY,
        model=AI_MODEL,
        temperature=ANALYSIS_TEMPERATURE,
        max_retries=0,
        model_kwargs={"response_format": {"type": "json_object"}}
    )


# --- CONTRACT TYPE DETECTION ---

def normalize_contract_type(label: Optional[str]) -> Optional[ContractType]:
    """
    Map a free-text label from the AI backend onto the closed contract type set.
    Unrecognized labels fall back to ContractType.OTHER; a blank label gives None.
    """
    if not label or not label.strip():
        return None

    cleaned = label.strip().splitlines()[0]
    cleaned = _LABEL_NOISE.sub("", cleaned).strip(" \t\"'`*.:").lower()
    if not cleaned:
        return None

    exact = ContractType.from_label(cleaned)
    if exact:
        return exact

    trimmed = re.sub(r"\b(contract|agreement)s?\b", "", cleaned).strip(" -")
    exact = ContractType.from_label(trimmed)
    if exact:
        return exact

    # Longest alias first, so multi-word aliases win over single words
    for alias in sorted(CONTRACT_TYPE_ALIASES, key=len, reverse=True):
        if re.search(rf"\b{re.escape(alias)}\b", cleaned):
            return ContractType(CONTRACT_TYPE_ALIASES[alias])

    candidates = [value.lower() for value in ContractType.labels()] + list(CONTRACT_TYPE_ALIASES)
    close = difflib.get_close_matches(trimmed or cleaned, candidates, n=1, cutoff=0.8)
    if close:
        return ContractType.from_label(close[0])

    logger.warning(f"Unrecognized contract type label '{label.strip()[:60]}', using '{ContractType.OTHER.value}'")
    return ContractType.OTHER


def detect_type(contract_text: str, llm=None) -> ContractType:
    """Ask the AI backend which contract type the text belongs to."""
    if not contract_text or not contract_text.strip():
        raise ClassificationError("There is no contract text to classify.")

    prompt_template = PromptTemplate(
        template=CONTRACT_TYPE_PROMPT_TEMPLATE,
        input_variables=["contract_text"],
        partial_variables={"contract_types": ", ".join(ContractType.labels())},
    )
    chain = prompt_template | (llm or get_detection_llm())

    try:
        logger.info("Detecting contract type")
        response = chain.invoke({"contract_text": contract_text[:CLASSIFIER_MAX_CHARS]})
    except Exception as e:
        logger.error(f"Contract type detection call failed: {str(e)}")
        raise ClassificationError("The AI backend could not be reached to detect the contract type.", retryable=True) from e

    label = message_text(response)
    contract_type = normalize_contract_type(label)
    if contract_type is None:
        logger.error("Contract type detection returned an empty label")
        raise ClassificationError("The AI backend returned no usable contract type.")

    logger.info(f"Detected contract type: {contract_type.value} (raw label: '{label.strip()[:60]}')")
    return contract_type


# --- CONTRACT ANALYSIS ---

def _normalize_level(value: Any) -> Any:
    if isinstance(value, str):
        key = value.strip().lower()
        return LEVEL_ALIASES.get(key, key)
    return value


def _normalize_items(items: Any, legacy_key: str, level_key: str) -> Any:
    if not isinstance(items, list):
        return items
    normalized = []
    for item in items:
        if not isinstance(item, dict):
            normalized.append(item)
            continue
        item = dict(item)
        if "description" not in item and legacy_key in item:
            item["description"] = item.pop(legacy_key)
        if level_key in item:
            item[level_key] = _normalize_level(item[level_key])
        normalized.append(item)
    return normalized


def _coerce_score(value: Any) -> Any:
    """Whole number on the 0-100 scale, from an int, a finite float or "85" / "85/100"."""
    if isinstance(value, bool):
        raise AnalysisSchemaError("The AI backend returned a boolean overallScore.")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise AnalysisSchemaError("The AI backend returned a non-finite overallScore.")
        return round(value)
    if isinstance(value, str):
        match = _SCORE_PATTERN.match(value)
        if not match:
            raise AnalysisSchemaError("The AI backend returned an unreadable overallScore.")
        return round(float(match.group(1)))
    return value


def _coerce_string_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [item if isinstance(item, str) else json.dumps(item) if isinstance(item, (dict, list)) else str(item)
                for item in value if item is not None]
    return value


def _coerce_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, list):
        return "\n".join(str(item) for item in value)
    return value


def normalize_analysis_payload(raw: Any) -> Dict[str, Any]:
    """
    Bring a decoded AI reply into the shape AnalysisResult validates.
    Only representation is adjusted here; missing required fields stay missing.
    """
    if not isinstance(raw, dict):
        raise AnalysisSchemaError("The AI backend did not return a JSON object.")

    data = dict(raw)
    # Provenance is attached by the pipeline, never taken from the model
    for key in ("id", "_id", "userId", "contractType", "contractText", "attachments", "createdAt", "aiModel"):
        data.pop(key, None)

    if "risks" in data:
        data["risks"] = _normalize_items(data["risks"], "risk", "severity")
    if "opportunities" in data:
        data["opportunities"] = _normalize_items(data["opportunities"], "opportunity", "impact")
    if "overallScore" in data:
        data["overallScore"] = _coerce_score(data["overallScore"])

    for key in STRING_LIST_FIELDS:
        if key in data:
            data[key] = _coerce_string_list(data[key])
    for key in TEXT_FIELDS:
        if key in data:
            data[key] = _coerce_text(data[key])
    if not data.get("language"):
        data["language"] = DEFAULT_LANGUAGE

    financial_terms = data.get("financialTerms")
    if financial_terms is None:
        data.pop("financialTerms", None)
    elif isinstance(financial_terms, str):
        data["financialTerms"] = {"description": financial_terms, "details": []}
    elif isinstance(financial_terms, dict):
        financial_terms = dict(financial_terms)
        financial_terms["description"] = _coerce_text(financial_terms.get("description"))
        financial_terms["details"] = _coerce_string_list(financial_terms.get("details"))
        data["financialTerms"] = financial_terms

    return data


def analyze(contract_text: str, contract_type: ContractType, llm=None, model_name: Optional[str] = None) -> AnalysisResult:
    """
    Produce a validated structured analysis of a contract. Does not persist anything.
    """
    contract_type = ContractType(contract_type)
    prompt_template = PromptTemplate(
        template=ANALYSIS_PROMPT_TEMPLATE,
        input_variables=["contract_type", "contract_text"],
    )
    chain = prompt_template | (llm or get_analysis_llm())

    try:
        logger.info(f"Analyzing {contract_type.value} contract ({len(contract_text)} characters)")
        response = chain.invoke({
            "contract_type": contract_type.value,
            "contract_text": contract_text,
        })
    except Exception as e:
        logger.error(f"Contract analysis call failed: {str(e)}")
        raise BackendUnavailableError("The AI backend could not be reached to analyze the contract.") from e

    try:
        raw = parse_json_response(message_text(response))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse analysis JSON: {str(e)}")
        raise AnalysisSchemaError("The AI backend returned an analysis that is not valid JSON.") from e

    try:
        payload = normalize_analysis_payload(raw)
    except AnalysisSchemaError as e:
        logger.error(f"Analysis reply could not be normalized: {e.message}")
        raise
    except (ValueError, TypeError, OverflowError) as e:
        logger.error(f"Analysis reply could not be normalized: {str(e)}")
        raise AnalysisSchemaError("The AI backend returned an analysis with unusable values.") from e
    payload["aiModel"] = model_name or getattr(llm, "model_name", None) or AI_MODEL

    try:
        result = AnalysisResult.model_validate(payload)
    except ValidationError as e:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in e.errors()})
        logger.error(f"Analysis reply failed validation on: {', '.join(fields)}")
        raise AnalysisSchemaError(f"The AI backend returned an incomplete analysis (invalid fields: {', '.join(fields[:5])}).") from e

    logger.info(f"Analysis complete: score {result.overall_score}, {len(result.risks)} risk(s), {len(result.opportunities)} opportunity(ies)")
    return result
