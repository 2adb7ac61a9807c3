"""
PDF text extraction for uploaded contracts.
"""
import logging
from dataclasses import dataclass, field
from typing import List

from langchain_community.document_loaders import PyMuPDFLoader

from errors import ExtractionError

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n"


@dataclass
class ExtractedDocument:
    """Page texts of one document, in page order."""
    source: str
    pages: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return PAGE_SEPARATOR.join(self.pages)

    def is_empty(self) -> bool:
        return not self.text.strip()


def load_document(file_url: str) -> ExtractedDocument:
    """Fetch a PDF from a URL (or local path) and read the text of every page.

    Raises ExtractionError when the file cannot be fetched or decoded.
    """
    try:
        logger.info(f"Loading PDF: {file_url}")
        loader = PyMuPDFLoader(file_url)
        documents = loader.load()
    except Exception as e:
        logger.error(f"Failed to load PDF {file_url}: {str(e)}")
        raise ExtractionError("The document could not be fetched or read as a PDF.", source=file_url) from e

    # Loader yields one document per page; keep decoder page order.
    documents = sorted(documents, key=lambda doc: doc.metadata.get("page", 0))
    extracted = ExtractedDocument(source=file_url, pages=[doc.page_content for doc in documents])
    logger.info(f"Loaded {len(extracted.pages)} page(s) from {file_url}")
    return extracted


def extract_text(file_url: str) -> str:
    """Return the concatenated text of all pages, joined with newlines.

    A document without any text layer is a failure, not an empty result.
    """
    document = load_document(file_url)
    if document.is_empty():
        logger.error(f"No extractable text in {file_url} ({len(document.pages)} page(s))")
        raise ExtractionError("The document contains no extractable text.", source=file_url)
    return document.text
