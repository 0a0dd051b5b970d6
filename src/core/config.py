"""
EDI 835 Configuration
Envelope identifiers and delimiter defaults for X12 835 generation.
Source: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EDISettings(BaseSettings):
    """
    X12 835 generation settings.

    Every value can be overridden through an EDI_-prefixed environment
    variable, e.g. EDI_INTERCHANGE_SENDER_ID=ACMEPAYER.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="EDI_",
    )

    # =========================================================================
    # Delimiters
    # =========================================================================
    DELIMITERS: str = Field(
        default="*~",
        min_length=2,
        max_length=2,
        description="Element separator followed by segment terminator",
    )
    COMPONENT_SEPARATOR: str = Field(
        default=":",
        min_length=1,
        max_length=1,
        description="Composite element separator (ISA16)",
    )
    SEGMENT_JOINER: str = Field(
        default="\n",
        description="Cosmetic text placed between rendered segments",
    )

    # =========================================================================
    # Interchange (ISA) / Functional Group (GS)
    # =========================================================================
    INTERCHANGE_SENDER_QUALIFIER: str = Field(default="ZZ", max_length=2)
    INTERCHANGE_SENDER_ID: str = Field(default="SUBMITTERID", max_length=15)
    INTERCHANGE_RECEIVER_QUALIFIER: str = Field(default="ZZ", max_length=2)
    INTERCHANGE_RECEIVER_ID: str = Field(default="RECEIVERID", max_length=15)
    REPETITION_SEPARATOR: str = Field(
        default="U",
        min_length=1,
        max_length=1,
        description="ISA11 value",
    )
    INTERCHANGE_VERSION: str = Field(default="00401", min_length=5, max_length=5)
    USAGE_INDICATOR: str = Field(
        default="P",
        pattern=r"^[PT]$",
        description="P=Production, T=Test",
    )
    GROUP_SENDER_CODE: str = Field(default="PAYERID")
    GROUP_RECEIVER_CODE: str = Field(default="RECEIVERID")
    IMPLEMENTATION_VERSION: str = Field(default="005010X221A1")

    # =========================================================================
    # Payment / Claim Defaults
    # =========================================================================
    ORIGINATING_COMPANY_ID: str = Field(
        default="1234567890",
        description="TRN03 originating company identifier",
    )
    CLAIM_FILING_INDICATOR: str = Field(
        default="MB",
        description="CLP06 claim filing indicator (MB=Medicare Part B)",
    )
    FACILITY_CODE: str = Field(default="11", description="CLP08 facility type (11=Office)")

    @field_validator("DELIMITERS")
    @classmethod
    def validate_delimiters(cls, v: str) -> str:
        """Element separator and terminator must differ and not be alphanumeric."""
        if v[0] == v[1]:
            raise ValueError("Element separator and segment terminator must differ")
        if v[0].isalnum() or v[1].isalnum():
            raise ValueError("Delimiters must not be alphanumeric")
        return v

    @property
    def element_separator(self) -> str:
        return self.DELIMITERS[0]

    @property
    def segment_terminator(self) -> str:
        return self.DELIMITERS[1]


@lru_cache
def get_edi_settings() -> EDISettings:
    """Get cached EDI settings instance."""
    return EDISettings()
