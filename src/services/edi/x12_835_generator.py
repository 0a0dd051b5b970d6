"""
X12 835 Remittance Advice Generator.

Generates X12 835 remittance advice text from a remittance model built
by the claim entry form. Missing optional data falls back to placeholder
values; generation never fails on partial input.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from datetime import date, datetime
from decimal import Decimal, localcontext
from enum import Enum
import random
import logging

from src.core.config import EDISettings, get_edi_settings
from src.services.edi.x12_base import (
    AMOUNT_PRECISION,
    Clock,
    Delimiters,
    X12Segment,
    coerce_date,
    format_isa_date,
    format_x12_amount,
    format_x12_date,
    format_x12_time,
    generate_control_number,
    parse_x12_amount,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================


class ClaimStatus(str, Enum):
    """Claim status code (CLP02)."""

    PROCESSED_PRIMARY = "1"  # Processed as primary
    PROCESSED_SECONDARY = "2"  # Processed as secondary
    PROCESSED_TERTIARY = "3"  # Processed as tertiary
    DENIED = "4"  # Denied
    PRIMARY_FORWARDED = "19"  # Processed as primary, forwarded
    SECONDARY_FORWARDED = "20"  # Processed as secondary, forwarded
    TERTIARY_FORWARDED = "21"  # Processed as tertiary, forwarded
    REVERSAL = "22"  # Reversal of previous payment
    NOT_OUR_CLAIM = "23"  # Not our claim, forwarded


class AdjustmentGroup(str, Enum):
    """Claim adjustment group code (CAS01)."""

    CO = "CO"  # Contractual Obligations
    CR = "CR"  # Corrections and Reversals
    OA = "OA"  # Other Adjustments
    PI = "PI"  # Payor Initiated Reductions
    PR = "PR"  # Patient Responsibility


# Claim-level adjustments are always reported as contractual write-offs.
CLAIM_ADJUSTMENT_GROUP = AdjustmentGroup.CO.value
CLAIM_ADJUSTMENT_REASON = "45"
DEFAULT_PROCEDURE_CODE = "XXXXX"
DEFAULT_PLB_CODE = "WO"
TRANSACTION_CONTROL_NUMBER = "0001"


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class PayerInfo:
    """Payer information for 835 remittance (Loop 1000A)."""

    name: str = ""
    payer_id: str = ""
    address_line1: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


@dataclass
class PayeeInfo:
    """Payee (provider) information for 835 remittance (Loop 1000B)."""

    name: str = ""
    npi: str = ""
    address_line1: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


@dataclass
class PatientInfo:
    """Patient/insured identity used in the claim NM1 segments."""

    first_name: str = ""
    last_name: str = ""
    middle_name: str = ""
    member_id: str = ""


@dataclass
class AdjustmentInput:
    """
    Service line adjustment.

    The adjustment code is a "GROUP-REASON" composite, e.g. "CO-45"
    (contractual obligation, charges exceed fee schedule).
    """

    adjustment_code: str = ""
    amount: str = "0"

    @property
    def group_code(self) -> str:
        parts = self.adjustment_code.split("-") if self.adjustment_code else []
        return (parts[0] if len(parts) > 0 else "") or CLAIM_ADJUSTMENT_GROUP

    @property
    def reason_code(self) -> str:
        parts = self.adjustment_code.split("-") if self.adjustment_code else []
        return (parts[1] if len(parts) > 1 else "") or CLAIM_ADJUSTMENT_REASON


@dataclass
class ServiceLineInput:
    """
    Service line payment information.

    Maps to Loop 2110 in X12 835.
    """

    procedure_code: str = ""
    charge_amount: str = "0"
    paid_amount: str = "0"
    units: str = "1"
    service_date: Optional[date] = None
    adjustments: List[AdjustmentInput] = field(default_factory=list)


@dataclass
class ClaimInput:
    """
    Claim-level payment information.

    Maps to Loop 2100 in X12 835.
    """

    claim_number: str = ""
    total_charge: str = "0"
    payment: str = "0"
    adjustment: str = "0"
    service_date: Optional[date] = None
    claim_status: str = ClaimStatus.PROCESSED_PRIMARY.value
    service_lines: List[ServiceLineInput] = field(default_factory=list)


@dataclass
class ProviderAdjustmentInput:
    """Provider level adjustment reported in the PLB segment."""

    adjustment_code: str = DEFAULT_PLB_CODE
    adjustment_id: str = ""
    amount: str = "0"


@dataclass
class RemittanceModel:
    """
    Complete remittance data.

    Contains all data needed to generate an X12 835.
    """

    payer: PayerInfo = field(default_factory=PayerInfo)
    payee: PayeeInfo = field(default_factory=PayeeInfo)
    patient: PatientInfo = field(default_factory=PatientInfo)
    claims: List[ClaimInput] = field(default_factory=list)

    # Provider level adjustments taken by the payer (PLB)
    provider_adjustments: List[ProviderAdjustmentInput] = field(default_factory=list)

    # Defaults to the generation date when not supplied
    payment_date: Optional[date] = None
    fiscal_period_end: Optional[date] = None

    @property
    def total_payment(self) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = AMOUNT_PRECISION
            return sum(
                (parse_x12_amount(claim.payment) for claim in self.claims), Decimal("0")
            )


# =============================================================================
# Generator
# =============================================================================


class X12835Generator:
    """
    Generator for X12 835 Remittance Advice.

    Generates 5010 version 835 transactions. The clock and random source
    are injectable so that fixed inputs produce byte-identical output.

    Usage:
        generator = X12835Generator()
        edi_content = generator.generate(remittance)
    """

    def __init__(
        self,
        delimiters: Optional[Delimiters] = None,
        settings: Optional[EDISettings] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_edi_settings()
        delimiters = delimiters or Delimiters.from_pair(self.settings.DELIMITERS)
        self.element_sep = delimiters.element
        self.segment_term = delimiters.terminator
        self.component_sep = self.settings.COMPONENT_SEPARATOR
        self.clock = clock or datetime.now
        self.rng = rng

    def generate(self, remittance: RemittanceModel) -> str:
        """
        Generate X12 835 from remittance data.

        Args:
            remittance: RemittanceModel with payment information

        Returns:
            X12 835 EDI content as string
        """
        segments = self.build_segments(remittance)
        content = self.settings.SEGMENT_JOINER.join(
            segment.render(self.element_sep, self.segment_term) for segment in segments
        )
        logger.debug(
            f"Generated 835 with {len(segments)} segments for {len(remittance.claims)} claims"
        )
        return content

    def build_segments(self, remittance: RemittanceModel) -> List[X12Segment]:
        """Build the ordered segment list for a remittance."""
        now = self.clock()
        interchange_control = generate_control_number(9, self.rng)
        group_control = generate_control_number(4, self.rng)

        # Transaction set body, ST through SE
        transaction = [
            self._build_st(),
            self._build_bpr(remittance, now),
            self._build_trn(),
        ]

        if remittance.payee.npi:
            transaction.append(self._build_segment("REF", "EV", remittance.payee.npi))

        transaction.append(self._build_dtm("405", now.date()))

        # Loop 1000A - Payer Identification
        transaction.extend(self._build_n1_loop("PR", remittance.payer))

        # Loop 1000B - Payee Identification
        transaction.extend(self._build_n1_loop("PE", remittance.payee))

        # Loop 2000 - Header Number
        transaction.append(self._build_segment("LX", "1"))

        # Loop 2100 - Claim Payment Information (per claim)
        for claim in remittance.claims:
            transaction.extend(self._build_loop_2100(claim, remittance, now))

        if remittance.provider_adjustments:
            transaction.append(self._build_plb(remittance, now))

        # +1 for SE itself
        transaction.append(
            self._build_segment("SE", str(len(transaction) + 1), TRANSACTION_CONTROL_NUMBER)
        )

        segments = [
            self._build_isa(now, interchange_control),
            self._build_gs(now, group_control),
            *transaction,
            self._build_segment("GE", "1", group_control),
            self._build_segment("IEA", "1", interchange_control),
        ]
        for position, segment in enumerate(segments):
            segment.position = position
        return segments

    def _build_segment(self, segment_id: str, *elements) -> X12Segment:
        """Build a segment from ID and elements."""
        return X12Segment(
            segment_id=segment_id,
            elements=[str(e) if e is not None else "" for e in elements],
        )

    def _build_isa(self, now: datetime, control_number: str) -> X12Segment:
        """Build ISA (Interchange Control Header) segment."""
        cfg = self.settings
        return self._build_segment(
            "ISA",
            "00",  # Authorization qualifier
            " " * 10,  # Authorization info
            "00",  # Security qualifier
            " " * 10,  # Security info
            cfg.INTERCHANGE_SENDER_QUALIFIER,
            cfg.INTERCHANGE_SENDER_ID.ljust(15),
            cfg.INTERCHANGE_RECEIVER_QUALIFIER,
            cfg.INTERCHANGE_RECEIVER_ID.ljust(15),
            format_isa_date(now.date()),
            format_x12_time(now),
            cfg.REPETITION_SEPARATOR,
            cfg.INTERCHANGE_VERSION,
            control_number,
            "0",  # Ack requested
            cfg.USAGE_INDICATOR,
            self.component_sep,
        )

    def _build_gs(self, now: datetime, control_number: str) -> X12Segment:
        """Build GS (Functional Group Header) segment."""
        return self._build_segment(
            "GS",
            "HP",  # Functional ID (HP=Health Care Claim Payment)
            self.settings.GROUP_SENDER_CODE,
            self.settings.GROUP_RECEIVER_CODE,
            format_x12_date(now.date()),
            format_x12_time(now),
            control_number,
            "X",  # Responsible agency
            self.settings.IMPLEMENTATION_VERSION,
        )

    def _build_st(self) -> X12Segment:
        """Build ST (Transaction Set Header) segment."""
        return self._build_segment(
            "ST",
            "835",
            TRANSACTION_CONTROL_NUMBER,
            self.settings.IMPLEMENTATION_VERSION,
        )

    def _build_bpr(self, rem: RemittanceModel, now: datetime) -> X12Segment:
        """Build BPR (Financial Information) segment."""
        return self._build_segment(
            "BPR",
            "I",  # Remittance information only
            format_x12_amount(rem.total_payment),
            "C",  # Credit
            "ACH",  # Payment method
            "CCP",  # Cash concentration/disbursement plus
            "01",  # Payer DFI qualifier (ABA routing number)
            "000000000",  # Payer DFI ID
            "DA",  # Account qualifier (demand deposit)
            "0000000000",  # Payer account number
            rem.payer.payer_id or "PAYERID",  # Originating company ID
            "",  # Originating company supplemental
            "01",  # Payee DFI qualifier
            "000000000",  # Payee DFI ID
            "DA",  # Payee account qualifier
            "0000000000",  # Payee account number
            format_x12_date(rem.payment_date or now.date()),
        )

    def _build_trn(self) -> X12Segment:
        """Build TRN (Reassociation Trace Number) segment."""
        return self._build_segment(
            "TRN",
            "1",  # Trace type (1=Current Transaction)
            generate_control_number(12, self.rng),  # Check/EFT number
            self.settings.ORIGINATING_COMPANY_ID,
        )

    def _build_dtm(self, qualifier: str, dt: date) -> X12Segment:
        """Build DTM (Date/Time Reference) segment."""
        return self._build_segment("DTM", qualifier, format_x12_date(dt))

    def _build_n1_loop(self, entity_code: str, party: Union[PayerInfo, PayeeInfo]) -> List[X12Segment]:
        """Build an N1/N3/N4 party identification loop."""
        if entity_code == "PR":
            name = party.name or "PAYER NAME"
            id_code = party.payer_id
        else:
            name = party.name or "PROVIDER NAME"
            id_code = party.npi

        n1 = self._build_segment("N1", entity_code, name)
        if id_code:
            n1.elements.extend(["XX", id_code])

        return [
            n1,
            self._build_segment("N3", party.address_line1 or "123 MAIN ST"),
            self._build_segment(
                "N4",
                party.city or "ANYTOWN",
                party.state or "ST",
                party.zip_code or "12345",
            ),
        ]

    def _build_nm1(
        self,
        entity_code: str,
        entity_type: str,
        last_name: str = "",
        first_name: str = "",
        middle_name: str = "",
        id_qualifier: str = "",
        id_code: str = "",
    ) -> X12Segment:
        """Build NM1 (Individual or Organizational Name) segment."""
        nm1 = self._build_segment(
            "NM1",
            entity_code,
            entity_type,  # 1=Person, 2=Non-person entity
            last_name,
            first_name,
            middle_name,
            "",  # Prefix
            "",  # Suffix
        )
        if id_code:
            nm1.elements.extend([id_qualifier, id_code])
        return nm1

    def _build_patient_nm1(self, entity_code: str, patient: PatientInfo) -> X12Segment:
        return self._build_nm1(
            entity_code,
            "1",
            patient.last_name,
            patient.first_name,
            patient.middle_name,
            "MI",
            patient.member_id,
        )

    def _build_provider_nm1(self, entity_code: str, payee: PayeeInfo) -> X12Segment:
        # Named providers are organizations; unnamed ones are left as persons
        if payee.name:
            return self._build_nm1(entity_code, "2", payee.name, id_qualifier="XX", id_code=payee.npi)
        return self._build_nm1(entity_code, "1", id_qualifier="XX", id_code=payee.npi)

    def _build_loop_2100(
        self, claim: ClaimInput, rem: RemittanceModel, now: datetime
    ) -> List[X12Segment]:
        """Build Loop 2100 - Claim Payment Information."""
        segments = []

        claim_number = claim.claim_number or f"CLM{int(now.timestamp() * 1000)}"

        # CLP - Claim Payment Information
        segments.append(self._build_segment(
            "CLP",
            claim_number,
            claim.claim_status or ClaimStatus.PROCESSED_PRIMARY.value,
            format_x12_amount(claim.total_charge),
            format_x12_amount(claim.payment),
            format_x12_amount(claim.adjustment),  # Patient responsibility
            self.settings.CLAIM_FILING_INDICATOR,
            generate_control_number(10, self.rng),  # Payer claim control number
            self.settings.FACILITY_CODE,
            "1",  # Claim frequency (original)
        ))

        # CAS - Claim Adjustment
        if parse_x12_amount(claim.adjustment) != 0:
            segments.append(self._build_segment(
                "CAS",
                CLAIM_ADJUSTMENT_GROUP,
                CLAIM_ADJUSTMENT_REASON,
                format_x12_amount(claim.adjustment),
            ))

        # NM1 - Patient, Insured, Corrected Patient/Insured, Service Provider
        segments.append(self._build_patient_nm1("QC", rem.patient))
        segments.append(self._build_patient_nm1("IL", rem.patient))
        segments.append(self._build_provider_nm1("74", rem.payee))
        segments.append(self._build_provider_nm1("82", rem.payee))

        # REF - Other Claim Related Identification
        if claim.claim_number:
            segments.append(self._build_segment("REF", "1K", claim.claim_number))

        # DTM - Statement Date
        if claim.service_date:
            segments.append(self._build_dtm("232", claim.service_date))

        # Loop 2110 - Service Payment Information
        for line_number, service in enumerate(claim.service_lines, start=1):
            segments.extend(self._build_loop_2110(service, line_number))

        return segments

    def _build_loop_2110(self, service: ServiceLineInput, line_number: int) -> List[X12Segment]:
        """Build Loop 2110 - Service Payment Information."""
        segments = []

        procedure_composite = self.component_sep.join(
            ["HC", service.procedure_code or DEFAULT_PROCEDURE_CODE]
        )

        # SVC - Service Payment Information
        segments.append(self._build_segment(
            "SVC",
            procedure_composite,
            format_x12_amount(service.charge_amount),
            format_x12_amount(service.paid_amount),
            "",  # Revenue code
            service.units or "1",
        ))

        # DTM - Service Date
        if service.service_date:
            segments.append(self._build_dtm("472", service.service_date))

        # CAS - Service Adjustments
        for adj in service.adjustments:
            segments.append(self._build_segment(
                "CAS",
                adj.group_code,
                adj.reason_code,
                format_x12_amount(adj.amount),
            ))

        # REF - Line Item Control Number
        segments.append(self._build_segment("REF", "6R", str(line_number)))

        return segments

    def _build_plb(self, rem: RemittanceModel, now: datetime) -> X12Segment:
        """Build PLB (Provider Level Adjustment) segment."""
        plb = self._build_segment(
            "PLB",
            rem.payee.npi or "PROVIDERID",
            format_x12_date(rem.fiscal_period_end or now.date()),
        )
        for adj in rem.provider_adjustments:
            plb.elements.append(
                self.component_sep.join([adj.adjustment_code or DEFAULT_PLB_CODE, adj.adjustment_id])
            )
            plb.elements.append(format_x12_amount(adj.amount))
        return plb


# =============================================================================
# Helper Functions
# =============================================================================


def _text(value: Any, default: str = "") -> str:
    """Normalize a form value to text; None and blanks use the default."""
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def create_remittance_from_form(form_data: Dict[str, Any]) -> RemittanceModel:
    """
    Create RemittanceModel from the claim entry form payload.

    The form uses camelCase keys grouped as insurance, provider, patient,
    claims and plb. Missing keys fall back to model defaults.
    """
    insurance = form_data.get("insurance") or {}
    provider = form_data.get("provider") or {}
    patient = form_data.get("patient") or {}
    plb = form_data.get("plb") or {}

    claims = []
    for claim in form_data.get("claims") or []:
        service_lines = []
        for line in claim.get("serviceLines") or []:
            service_lines.append(ServiceLineInput(
                procedure_code=_text(line.get("procedureCode")),
                charge_amount=_text(line.get("chargeAmount"), "0"),
                paid_amount=_text(line.get("paidAmount"), "0"),
                units=_text(line.get("units"), "1"),
                service_date=coerce_date(line.get("serviceDate")),
                adjustments=[
                    AdjustmentInput(
                        adjustment_code=_text(adj.get("adjustmentCode")),
                        amount=_text(adj.get("adjustmentAmount"), "0"),
                    )
                    for adj in line.get("claimAdjustments") or []
                ],
            ))

        claims.append(ClaimInput(
            claim_number=_text(claim.get("claimNumber")),
            total_charge=_text(claim.get("totalCharge"), "0"),
            payment=_text(claim.get("payment"), "0"),
            adjustment=_text(claim.get("adjustment"), "0"),
            service_date=coerce_date(claim.get("serviceDate")),
            claim_status=_text(claim.get("claimStatus"), ClaimStatus.PROCESSED_PRIMARY.value),
            service_lines=service_lines,
        ))

    return RemittanceModel(
        payer=PayerInfo(
            name=_text(insurance.get("planName")),
            payer_id=_text(insurance.get("payerId")),
            address_line1=_text(insurance.get("address")),
            city=_text(insurance.get("city")),
            state=_text(insurance.get("state")),
            zip_code=_text(insurance.get("zip")),
        ),
        payee=PayeeInfo(
            name=_text(provider.get("name")),
            npi=_text(provider.get("npi")),
            address_line1=_text(provider.get("address")),
            city=_text(provider.get("city")),
            state=_text(provider.get("state")),
            zip_code=_text(provider.get("zip")),
        ),
        patient=PatientInfo(
            first_name=_text(patient.get("firstName")),
            last_name=_text(patient.get("lastName")),
            middle_name=_text(patient.get("middleName")),
            member_id=_text(patient.get("memberId")),
        ),
        claims=claims,
        provider_adjustments=[
            ProviderAdjustmentInput(
                adjustment_code=_text(adj.get("adjustmentCode"), DEFAULT_PLB_CODE),
                adjustment_id=_text(adj.get("adjustmentId")),
                amount=_text(adj.get("adjustmentAmount"), "0"),
            )
            for adj in plb.get("adjustments") or []
        ],
    )


def encode(
    remittance: Union[RemittanceModel, Dict[str, Any]],
    delimiters: Union[Delimiters, str, None] = None,
    *,
    settings: Optional[EDISettings] = None,
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Encode a remittance as X12 835 text.

    Accepts either a RemittanceModel or the raw form payload; for a form
    payload its "delimiter" field is used when no delimiters are given.
    """
    if isinstance(remittance, dict):
        if delimiters is None:
            delimiters = remittance.get("delimiter")
        remittance = create_remittance_from_form(remittance)
    if isinstance(delimiters, str):
        delimiters = Delimiters.from_pair(delimiters)

    generator = X12835Generator(delimiters=delimiters, settings=settings, clock=clock, rng=rng)
    return generator.generate(remittance)
