"""
services/document_source.py

Turns a question source into a validated QuizDocument.
Public API:
  - parse_document(raw) -> QuizDocument       : already-decoded mapping
  - read_document(path) -> QuizDocument       : JSON file on disk

Any failure is a SourceUnavailableError; no partial document is returned.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from timed_quiz.errors import SourceUnavailableError
from timed_quiz.models.document_model import QuizDocument

logger = logging.getLogger(__name__)


def parse_document(raw: Any) -> QuizDocument:
    if not isinstance(raw, dict):
        raise SourceUnavailableError(f"Quiz document must be an object, got {type(raw).__name__}")
    try:
        return QuizDocument.model_validate(raw)
    except ValidationError as e:
        raise SourceUnavailableError(f"Invalid quiz document: {e.error_count()} error(s)") from e


def read_document(path: str) -> QuizDocument:
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailableError(f"Cannot read quiz document {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SourceUnavailableError(f"Quiz document {path} is not valid JSON: {e}") from e
    logger.info(f"Quiz document loaded: {path}")
    return parse_document(raw)
