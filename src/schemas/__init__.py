"""
Pydantic Schemas for the Remittance Toolkit.

This module exports all request/response schemas for the API.
"""

from src.schemas.edi import (
    EDI835GenerateRequest,
    EDI835GenerateResult,
    EDI835ContentRequest,
    EDI835ValidationResult,
    EDI835ParseResponse,
    RemittanceSummaryResponse,
    SegmentResponse,
)

__all__ = [
    # EDI
    "EDI835GenerateRequest",
    "EDI835GenerateResult",
    "EDI835ContentRequest",
    "EDI835ValidationResult",
    "EDI835ParseResponse",
    "RemittanceSummaryResponse",
    "SegmentResponse",
]
