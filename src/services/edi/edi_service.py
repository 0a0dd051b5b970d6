"""
EDI Service - Orchestrates X12 835 processing.

Provides high-level EDI operations:
- Generate 835 remittances from remittance data or the entry form
- Validate incoming 835 content
- Parse 835 content into a remittance summary
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from datetime import datetime, timezone
from uuid import uuid4
from enum import Enum
import random
import logging

from src.core.config import EDISettings, get_edi_settings
from src.services.edi.x12_base import (
    Clock,
    Delimiters,
    TransactionType,
    X12ParseError,
    X12Segment,
    tokenize,
)
from src.services.edi.x12_835_generator import (
    RemittanceModel,
    create_remittance_from_form,
    encode,
)
from src.services.edi.x12_835_validator import ValidationResult, X12835Validator
from src.services.edi.x12_835_parser import RemittanceSummary, decode

logger = logging.getLogger(__name__)


# =============================================================================
# Enums and Models
# =============================================================================


class EDITransactionStatus(str, Enum):
    """EDI transaction processing status."""

    VALIDATED = "validated"  # Syntax validation passed
    PARSED = "parsed"  # Successfully parsed
    COMPLETED = "completed"  # Generated
    FAILED = "failed"  # Processing failed
    REJECTED = "rejected"  # Rejected due to errors


class EDIDirection(str, Enum):
    """EDI transaction direction."""

    INBOUND = "inbound"  # Received from external
    OUTBOUND = "outbound"  # Sent to external


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EDI835Result:
    """Result of 835 generation."""

    transaction_id: str
    content: str
    control_number: str
    status: EDITransactionStatus
    claims_count: int = 0
    direction: EDIDirection = EDIDirection.OUTBOUND
    transaction_type: TransactionType = TransactionType.REMIT_835
    errors: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class EDI835ParseResult:
    """Result of parsing an incoming 835."""

    transaction_id: str
    control_number: str
    status: EDITransactionStatus
    segments: List[X12Segment] = field(default_factory=list)
    summary: Optional[RemittanceSummary] = None
    errors: List[str] = field(default_factory=list)
    processing_time_ms: int = 0
    direction: EDIDirection = EDIDirection.INBOUND
    transaction_type: TransactionType = TransactionType.REMIT_835
    created_at: datetime = field(default_factory=_utcnow)


# =============================================================================
# Service
# =============================================================================


class EDIService:
    """
    EDI Service for X12 835 processing.

    Usage:
        service = EDIService()
        result = await service.generate_835(form_data)
        parsed = await service.process_835(result.content)
        print(parsed.summary.check_amount)
    """

    def __init__(
        self,
        settings: Optional[EDISettings] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize EDI service.

        Args:
            settings: EDI envelope settings (defaults to environment)
            clock: Time source for generated envelopes
            rng: Random source for control numbers
        """
        self.settings = settings or get_edi_settings()
        self.clock = clock
        self.rng = rng
        self.validator = X12835Validator()

    async def generate_835(
        self,
        remittance: Union[RemittanceModel, Dict[str, Any]],
        delimiters: Optional[str] = None,
    ) -> EDI835Result:
        """
        Generate X12 835 remittance advice.

        Args:
            remittance: RemittanceModel or claim entry form payload
            delimiters: Element separator and terminator pair, e.g. "*~"

        Returns:
            EDI835Result with generated content
        """
        transaction_id = str(uuid4())

        try:
            if isinstance(remittance, dict):
                if delimiters is None:
                    delimiters = remittance.get("delimiter")
                remittance = create_remittance_from_form(remittance)

            logger.info(
                f"Generating 835 transaction {transaction_id} "
                f"for {len(remittance.claims)} claims"
            )

            content = encode(
                remittance,
                Delimiters.from_pair(delimiters or self.settings.DELIMITERS),
                settings=self.settings,
                clock=self.clock,
                rng=self.rng,
            )
            segments = tokenize(content)

            logger.info(f"Successfully generated 835 transaction {transaction_id}")

            return EDI835Result(
                transaction_id=transaction_id,
                content=content,
                control_number=self._extract_control_number(segments),
                status=EDITransactionStatus.COMPLETED,
                claims_count=len(remittance.claims),
            )

        except Exception as e:
            logger.exception(f"Error generating 835 transaction {transaction_id}")

            return EDI835Result(
                transaction_id=transaction_id,
                content="",
                control_number="",
                status=EDITransactionStatus.FAILED,
                errors=[str(e)],
            )

    async def validate_835(self, content: str) -> ValidationResult:
        """
        Validate X12 835 syntax without parsing.

        Args:
            content: Raw X12 835 content

        Returns:
            ValidationResult with accumulated errors
        """
        result = self.validator.validate(content)
        if not result.is_valid:
            logger.warning(f"835 validation failed with {len(result.errors)} errors")
        return result

    async def process_835(self, content: str) -> EDI835ParseResult:
        """
        Validate and parse incoming X12 835 content.

        Args:
            content: Raw X12 835 EDI content

        Returns:
            EDI835ParseResult with segments and remittance summary
        """
        start_time = _utcnow()
        transaction_id = str(uuid4())

        try:
            logger.info(f"Processing 835 transaction {transaction_id}")

            decoded = decode(content)
            processing_time = self._elapsed_ms(start_time)

            if not decoded.is_valid:
                logger.warning(
                    f"Rejected 835 transaction {transaction_id}: "
                    f"{len(decoded.errors)} validation errors"
                )
                return EDI835ParseResult(
                    transaction_id=transaction_id,
                    control_number="",
                    status=EDITransactionStatus.REJECTED,
                    errors=decoded.errors,
                    processing_time_ms=processing_time,
                )

            logger.info(
                f"Successfully parsed {len(decoded.summary.claims)} claims "
                f"from transaction {transaction_id}"
            )

            return EDI835ParseResult(
                transaction_id=transaction_id,
                control_number=self._extract_control_number(decoded.segments),
                status=EDITransactionStatus.PARSED,
                segments=decoded.segments,
                summary=decoded.summary,
                processing_time_ms=processing_time,
            )

        except X12ParseError as e:
            logger.error(f"Parse error in transaction {transaction_id}: {e}")

            return EDI835ParseResult(
                transaction_id=transaction_id,
                control_number="",
                status=EDITransactionStatus.FAILED,
                errors=[str(e)],
            )

        except Exception as e:
            logger.exception(f"Unexpected error in transaction {transaction_id}")

            return EDI835ParseResult(
                transaction_id=transaction_id,
                control_number="",
                status=EDITransactionStatus.FAILED,
                errors=[f"Unexpected error: {str(e)}"],
            )

    def _extract_control_number(self, segments: List[X12Segment]) -> str:
        """Extract interchange control number (ISA13) from the segments."""
        for seg in segments:
            if seg.segment_id == "ISA":
                return seg.get_element(12).strip()
        return ""

    def _elapsed_ms(self, start_time: datetime) -> int:
        return int((_utcnow() - start_time).total_seconds() * 1000)


# =============================================================================
# Factory Function
# =============================================================================


_edi_service: Optional[EDIService] = None


def get_edi_service() -> EDIService:
    """
    Get or create EDI service instance.

    Returns:
        EDIService instance
    """
    global _edi_service

    if _edi_service is None:
        _edi_service = EDIService()

    return _edi_service
