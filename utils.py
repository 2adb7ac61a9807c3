"""
Utility functions for the Contract Analysis pipeline.
"""
import json
import logging
import posixpath
from typing import Any, Dict, Tuple
from urllib.parse import unquote, urlparse

from errors import PipelineError

logger = logging.getLogger(__name__)


def file_name_from_url(file_url):
    """
    Derive the attachment file name from its hosting URL.

    Args:
        file_url: URL (or local path) of the uploaded file

    Returns:
        str: Last path segment, or "unknown_file.pdf" when there is none
    """
    path = urlparse(file_url).path or file_url
    name = unquote(posixpath.basename(path.rstrip("/")))
    return name or "unknown_file.pdf"


def error_response(error: PipelineError) -> Tuple[Dict[str, Any], int]:
    """
    Log a pipeline error and return a formatted error response.

    Args:
        error: The stage-qualified error

    Returns:
        tuple: (error_dict, status_code)
    """
    logger.error(f"Request failed at stage '{error.stage}': {error.message}")
    return error.to_dict(), error.status_code


def parse_json_response(response_content: str) -> Any:
    """Parse JSON response from LLM, handling common formatting issues.

    Raises json.JSONDecodeError when the reply is not JSON.
    """
    cleaned_json = response_content.strip().replace("```json", "").replace("```", "").strip()
    return json.loads(cleaned_json)


def message_text(message) -> str:
    """Plain text of a chat model reply, whose content may be a list of blocks."""
    content = getattr(message, "content", message)
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        content = "".join(parts)
    return content if isinstance(content, str) else str(content)
