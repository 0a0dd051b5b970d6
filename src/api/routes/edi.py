"""
EDI Processing API Endpoints.

Provides:
- X12 835 remittance generation from the claim entry form
- X12 835 validation
- X12 835 parsing into segments and a remittance summary
"""

import logging

from fastapi import APIRouter, status

from src.api.config import settings
from src.schemas.edi import (
    EDI835ContentRequest,
    EDI835GenerateRequest,
    EDI835GenerateResult,
    EDI835ParseResponse,
    EDI835ValidationResult,
    RemittanceSummaryResponse,
    SegmentResponse,
)
from src.services.edi import EDITransactionStatus, get_edi_service, tokenize
from src.utils.errors import EDIContentTooLargeError, EDIProcessingError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/edi",
    tags=["edi"],
)


def _check_content_length(content: str) -> None:
    if len(content) > settings.MAX_EDI_CONTENT_LENGTH:
        raise EDIContentTooLargeError(len(content), settings.MAX_EDI_CONTENT_LENGTH)


# =============================================================================
# 835 Endpoints
# =============================================================================


@router.post(
    "/835/generate",
    response_model=EDI835GenerateResult,
    status_code=status.HTTP_201_CREATED,
)
async def generate_835(request: EDI835GenerateRequest) -> EDI835GenerateResult:
    """
    Generate X12 835 remittance advice from the claim entry form.

    Missing optional fields are filled with placeholder values.

    Returns:
        Generated 835 content and metadata.
    """
    edi_service = get_edi_service()
    result = await edi_service.generate_835(request.to_form(), request.delimiter)

    if result.errors:
        raise EDIProcessingError("generate 835", result.errors)

    return EDI835GenerateResult(
        transaction_id=result.transaction_id,
        control_number=result.control_number,
        content=result.content,
        status=result.status.value,
        claims_count=result.claims_count,
        created_at=result.created_at,
    )


@router.post("/835/validate", response_model=EDI835ValidationResult)
async def validate_835(request: EDI835ContentRequest) -> EDI835ValidationResult:
    """
    Validate X12 835 syntax without parsing.

    Invalid content is a normal response with valid=false.

    Returns:
        Validation result with errors.
    """
    _check_content_length(request.content)

    try:
        edi_service = get_edi_service()
        result = await edi_service.validate_835(request.content)

        return EDI835ValidationResult(
            valid=result.is_valid,
            errors=result.errors,
            segment_count=len(tokenize(request.content)),
        )

    except Exception as e:
        logger.error(f"835 validation error: {e}", exc_info=True)
        raise EDIProcessingError("validate 835", [str(e)])


@router.post("/835/parse", response_model=EDI835ParseResponse)
async def parse_835(request: EDI835ContentRequest) -> EDI835ParseResponse:
    """
    Validate and parse X12 835 content.

    Content that fails validation is returned with status "rejected" and
    its validation errors.

    Returns:
        Segment listing and remittance summary.
    """
    _check_content_length(request.content)

    edi_service = get_edi_service()
    result = await edi_service.process_835(request.content)

    if result.status == EDITransactionStatus.FAILED:
        raise EDIProcessingError("parse 835", result.errors)

    return EDI835ParseResponse(
        transaction_id=result.transaction_id,
        control_number=result.control_number,
        status=result.status.value,
        errors=result.errors,
        segments=[
            SegmentResponse(
                segment_id=seg.segment_id,
                elements=seg.elements,
                description=seg.description,
            )
            for seg in result.segments
        ],
        summary=(
            RemittanceSummaryResponse.model_validate(result.summary)
            if result.summary
            else None
        ),
        processing_time_ms=result.processing_time_ms,
        created_at=result.created_at,
    )
