"""
Services Layer for the Remittance Toolkit.

Exports the X12 835 EDI services.
"""

from src.services.edi import (
    EDIService,
    get_edi_service,
    X12835Generator,
    X12835Validator,
    X12835Summarizer,
    X12Tokenizer,
    TransactionType,
    X12ParseError,
)

__all__ = [
    # EDI Services
    "EDIService",
    "get_edi_service",
    "X12835Generator",
    "X12835Validator",
    "X12835Summarizer",
    "X12Tokenizer",
    "TransactionType",
    "X12ParseError",
]
