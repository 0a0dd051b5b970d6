"""
X12 EDI Services for Remittance Processing.

Provides X12 835 integration:
- 835 remittance generation (outbound)
- 835 structural validation
- 835 parsing into a remittance summary (inbound)
"""

from src.services.edi.x12_base import (
    X12Segment,
    X12Tokenizer,
    Delimiters,
    TransactionType,
    X12ParseError,
    tokenize,
)
from src.services.edi.x12_835_generator import (
    X12835Generator,
    RemittanceModel,
    PayerInfo,
    PayeeInfo,
    PatientInfo,
    ClaimInput,
    ServiceLineInput,
    AdjustmentInput,
    ProviderAdjustmentInput,
    create_remittance_from_form,
    encode,
)
from src.services.edi.x12_835_validator import (
    X12835Validator,
    ValidationResult,
    validate,
)
from src.services.edi.x12_835_parser import (
    X12835Summarizer,
    RemittanceSummary,
    ClaimSummary,
    ServiceSummary,
    ClaimAdjustment,
    ProviderAdjustment,
    DecodeResult,
    SAMPLE_835,
    summarize,
    decode,
)
from src.services.edi.edi_service import (
    EDIService,
    EDI835Result,
    EDI835ParseResult,
    EDITransactionStatus,
    get_edi_service,
)

__all__ = [
    # Base
    "X12Segment",
    "X12Tokenizer",
    "Delimiters",
    "TransactionType",
    "X12ParseError",
    "tokenize",
    # 835 Generator
    "X12835Generator",
    "RemittanceModel",
    "PayerInfo",
    "PayeeInfo",
    "PatientInfo",
    "ClaimInput",
    "ServiceLineInput",
    "AdjustmentInput",
    "ProviderAdjustmentInput",
    "create_remittance_from_form",
    "encode",
    # 835 Validator
    "X12835Validator",
    "ValidationResult",
    "validate",
    # 835 Summarizer
    "X12835Summarizer",
    "RemittanceSummary",
    "ClaimSummary",
    "ServiceSummary",
    "ClaimAdjustment",
    "ProviderAdjustment",
    "DecodeResult",
    "SAMPLE_835",
    "summarize",
    "decode",
    # EDI Service
    "EDIService",
    "EDI835Result",
    "EDI835ParseResult",
    "EDITransactionStatus",
    "get_edi_service",
]
