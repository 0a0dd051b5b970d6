"""
Pydantic Schemas for EDI Processing.

Provides request/response models for X12 835 operations:
- 835 remittance generation from the claim entry form
- 835 validation
- 835 parsing into a remittance summary

Request bodies accept the form's camelCase keys as well as snake_case.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FormModel(BaseModel):
    """Base for request bodies mirroring the claim entry form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# 835 Generate Request
# =============================================================================


class InsuranceRequest(FormModel):
    """Payer (insurance plan) details."""

    payer_id: str = Field(default="", max_length=80)
    plan_name: str = Field(default="", max_length=60)
    address: str = Field(default="", max_length=55)
    city: str = Field(default="", max_length=30)
    state: str = Field(default="", max_length=2)
    zip: str = Field(default="", max_length=15)


class ProviderRequest(FormModel):
    """Payee (provider) details."""

    npi: str = Field(default="", pattern=r"^(\d{10})?$")
    name: str = Field(default="", max_length=60)
    address: str = Field(default="", max_length=55)
    city: str = Field(default="", max_length=30)
    state: str = Field(default="", max_length=2)
    zip: str = Field(default="", max_length=15)


class PatientRequest(FormModel):
    """Patient identity."""

    first_name: str = Field(default="", max_length=35)
    last_name: str = Field(default="", max_length=60)
    middle_name: str = Field(default="", max_length=25)
    member_id: str = Field(default="", max_length=80)


class ServiceAdjustmentRequest(FormModel):
    """Service line adjustment; code is GROUP-REASON, e.g. CO-45."""

    adjustment_code: str = Field(default="", max_length=10)
    adjustment_amount: Decimal = Decimal("0")


class ServiceLineRequest(FormModel):
    """Service line payment."""

    procedure_code: str = Field(default="", max_length=48)
    charge_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    units: int = Field(default=1, ge=1)
    service_date: Optional[date] = None
    claim_adjustments: list[ServiceAdjustmentRequest] = Field(default_factory=list)


class ClaimRequest(FormModel):
    """Claim payment."""

    claim_number: str = Field(default="", max_length=38)
    total_charge: Decimal = Decimal("0")
    payment: Decimal = Decimal("0")
    adjustment: Decimal = Decimal("0")
    service_date: Optional[date] = None
    claim_status: str = Field(default="1", pattern=r"^\d{1,2}$")
    service_lines: list[ServiceLineRequest] = Field(default_factory=list)


class ProviderAdjustmentRequest(FormModel):
    """Provider level adjustment."""

    adjustment_code: str = Field(default="WO", max_length=2)
    adjustment_id: str = Field(default="", max_length=50)
    adjustment_amount: Decimal = Decimal("0")


class PLBRequest(FormModel):
    adjustments: list[ProviderAdjustmentRequest] = Field(default_factory=list)


class EDI835GenerateRequest(FormModel):
    """Request to generate 835 remittance."""

    delimiter: str = Field(
        default="*~",
        min_length=2,
        max_length=2,
        description="Element separator followed by segment terminator",
    )
    insurance: InsuranceRequest = Field(default_factory=InsuranceRequest)
    provider: ProviderRequest = Field(default_factory=ProviderRequest)
    patient: PatientRequest = Field(default_factory=PatientRequest)
    claims: list[ClaimRequest] = Field(default_factory=list)
    plb: PLBRequest = Field(default_factory=PLBRequest)

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        if v[0] == v[1] or v[0].isalnum() or v[1].isalnum():
            raise ValueError("Delimiter must be two distinct non-alphanumeric characters")
        return v

    def to_form(self) -> dict:
        """Dump as the camelCase form payload."""
        return self.model_dump(by_alias=True, mode="json")


class EDI835GenerateResult(BaseModel):
    """Result of 835 generation."""

    transaction_id: str = Field(..., description="Unique transaction identifier")
    control_number: str = Field(..., description="ISA control number")
    content: str = Field(..., description="Generated X12 835 content")
    status: str = Field(..., description="Generation status")
    claims_count: int = Field(default=0, description="Number of claims encoded")
    errors: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# =============================================================================
# 835 Validate / Parse
# =============================================================================


class EDI835ContentRequest(BaseModel):
    """Request carrying raw 835 content."""

    content: str = Field(default="", description="Raw X12 835 EDI content")


class EDI835ValidationResult(BaseModel):
    """Result of 835 validation."""

    valid: bool = Field(..., description="Whether the EDI is valid")
    errors: list[str] = Field(default_factory=list, description="Validation errors")
    segment_count: int = Field(default=0, description="Number of segments")


class SegmentResponse(BaseModel):
    """Tokenized segment with its description."""

    segment_id: str
    elements: list[str] = Field(default_factory=list)
    description: str


class ClaimAdjustmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_code: Optional[str] = None
    reason_code: Optional[str] = None
    amount: Optional[str] = None
    quantity: Optional[str] = None


class ServiceSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    procedure_code: Optional[str] = None
    charged_amount: Optional[str] = None
    paid_amount: Optional[str] = None
    adjustments: list[ClaimAdjustmentResponse] = Field(default_factory=list)


class ClaimSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    claim_number: Optional[str] = None
    icn: Optional[str] = None
    claim_status: Optional[str] = None
    charged_amount: Optional[str] = None
    paid_amount: Optional[str] = None
    patient_responsibility: Optional[str] = None
    service_date: Optional[str] = None
    services: list[ServiceSummaryResponse] = Field(default_factory=list)
    adjustments: list[ClaimAdjustmentResponse] = Field(default_factory=list)
    remark_codes: list[str] = Field(default_factory=list)


class ProviderAdjustmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    identifier: Optional[str] = None
    date: Optional[str] = None
    reason_code: Optional[str] = None
    amount: Optional[str] = None


class RemittanceSummaryResponse(BaseModel):
    """Summary of a parsed 835."""

    model_config = ConfigDict(from_attributes=True)

    check_number: Optional[str] = None
    check_amount: Optional[str] = None
    check_date: Optional[str] = None
    payer_name: Optional[str] = None
    provider_name: Optional[str] = None
    claims: list[ClaimSummaryResponse] = Field(default_factory=list)
    provider_adjustments: list[ProviderAdjustmentResponse] = Field(default_factory=list)


class EDI835ParseResponse(BaseModel):
    """Result of 835 parsing."""

    transaction_id: str = Field(..., description="Unique transaction identifier")
    control_number: str = Field(default="", description="ISA control number")
    status: str = Field(..., description="Processing status")
    errors: list[str] = Field(default_factory=list, description="Validation or processing errors")
    segments: list[SegmentResponse] = Field(default_factory=list)
    summary: Optional[RemittanceSummaryResponse] = None
    processing_time_ms: int = Field(default=0, description="Processing time")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
