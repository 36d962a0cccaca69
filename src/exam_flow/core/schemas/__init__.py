"""
Schemas Package

JSON schema definition and validation utilities for paper documents.
"""

from .validator import (
    validate_paper,
    validate_group,
    ValidationError,
    PAPER_SCHEMA_VERSION,
)

__all__ = [
    "validate_paper",
    "validate_group",
    "ValidationError",
    "PAPER_SCHEMA_VERSION",
]
