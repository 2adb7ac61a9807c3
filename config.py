"""
Simple configuration for the Contract Analysis pipeline.
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Configuration class for the Contract Analysis pipeline."""

    # API Configuration
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")

    # Model Settings
    AI_MODEL = os.environ.get("AI_MODEL", "gpt-4o-mini")
    DETECTION_TEMPERATURE = 0
    ANALYSIS_TEMPERATURE = 0.3

    # Document Processing
    CLASSIFIER_MAX_CHARS = 8000
    DEFAULT_LANGUAGE = "en"

    # Persistence
    DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///contract_analyses.db")

    # API Settings
    API_HOST = "0.0.0.0"
    API_PORT = int(os.environ.get("PORT", 5001))
    API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
    API_VERSION = "1.0.0"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


# Module-level shortcuts
OPENAI_API_KEY = Config.OPENAI_API_KEY
AI_MODEL = Config.AI_MODEL
DETECTION_TEMPERATURE = Config.DETECTION_TEMPERATURE
ANALYSIS_TEMPERATURE = Config.ANALYSIS_TEMPERATURE
CLASSIFIER_MAX_CHARS = Config.CLASSIFIER_MAX_CHARS
DEFAULT_LANGUAGE = Config.DEFAULT_LANGUAGE
DATABASE_URL = Config.DATABASE_URL
API_HOST = Config.API_HOST
API_PORT = Config.API_PORT
API_DEBUG = Config.API_DEBUG
API_VERSION = Config.API_VERSION
LOG_LEVEL = Config.LOG_LEVEL
