"""
Shared helpers for services: text normalization, pagination and the write transaction wrapper.
"""
import logging
import math
from contextlib import contextmanager
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from proximos import errors
from proximos.config import settings

logger = logging.getLogger(__name__)


def clean_required(value: str | None, max_length: int | None = None) -> str:
    """Trim; reject empty or too long values with INVALID_INPUT."""
    text = (value or "").strip()
    if not text:
        raise errors.invalid_input()
    if max_length is not None and len(text) > max_length:
        raise errors.invalid_input({"max_length": max_length})
    return text


def clean_optional(value: str | None, max_length: int | None = None) -> str | None:
    """Trim; empty becomes None (clears the field)."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        raise errors.invalid_input({"max_length": max_length})
    return text


def normalize_page(page_number: int | None, page_size: int | None) -> tuple[int, int]:
    """page < 1 becomes 1; size outside 1..max_page_size becomes the default size."""
    page = page_number if page_number and page_number >= 1 else 1
    size = page_size if page_size and 1 <= page_size <= settings.max_page_size else settings.default_page_size
    return page, size


def total_pages(total: int, page_size: int) -> int:
    return int(math.ceil(total / page_size)) if page_size else 0


@contextmanager
def write_transaction(db: Session, conflict: Callable[[], errors.AppError] | None = None):
    """
    Run a block of writes and commit it. Any failure rolls the whole block back;
    unique violations (at flush or commit) become the given conflict error.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if conflict is not None and errors.is_unique_violation(e):
            logger.info("Write rejected by unique index: %s", getattr(e, "orig", e))
            raise conflict() from e
        raise
    except Exception:
        db.rollback()
        raise
