"""Verification service models."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_serializer, model_validator

from organic_verifier.config.constants import NOT_CERTIFIED, NOT_FOUND, CertificationStatus


class OperationInput(BaseModel):
    """One caller-submitted operation to verify."""

    model_config = ConfigDict(frozen=True)

    operation_name: str = ""
    id: str = Field(..., description="Registry identifier")
    products: list[str] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("id is required")
        return value

    @field_validator("products")
    @classmethod
    def strip_products(cls, v: list[str]) -> list[str]:
        return [p.strip() for p in v if p and p.strip()]

    @model_validator(mode="after")
    def default_operation_name(self) -> "OperationInput":
        name = self.operation_name.strip()
        # Frozen model: bypass __setattr__ for the derived default
        object.__setattr__(self, "operation_name", name or f"Operation {self.id}")
        return self


class Scope(BaseModel):
    """Certification status for one category of a registry record."""

    scope_name: str
    status: str | None = None
    effective_date: str | None = None
    certified_products: list[str] = Field(default_factory=list)

    @property
    def is_certified(self) -> bool:
        if not self.status:
            return False
        status = self.status.lower()
        if "not certified" in status or "uncertified" in status:
            return False
        return "certified" in status

    @field_serializer("status")
    def serialize_status(self, value: str | None) -> str:
        return value or NOT_CERTIFIED

    @field_serializer("effective_date")
    def serialize_effective_date(self, value: str | None) -> str:
        return value or NOT_FOUND


@dataclass
class CertificationRecord:
    """Structured fields extracted from one registry page."""

    operation_name: str | None
    certifier: str | None
    scopes: list[Scope]
    effective_date: str | None = None
    all_certified_products: list[str] = field(default_factory=list)

    @property
    def certification_status(self) -> CertificationStatus:
        if any(scope.is_certified for scope in self.scopes):
            return CertificationStatus.CERTIFIED
        return CertificationStatus.NOT_CERTIFIED


class VerificationResult(BaseModel):
    """Final per-operation verification row."""

    model_config = ConfigDict(frozen=True)

    operation_name: str
    id: str
    certifier: str
    certification_status: CertificationStatus
    effective_date: str | None = None
    all_certified_products: list[str] = Field(default_factory=list)
    matching_products: list[str] = Field(default_factory=list)
    missing_products: list[str] = Field(default_factory=list)
    source_url: str
    scopes: list[Scope] | None = None

    @field_serializer("effective_date")
    def serialize_effective_date(self, value: str | None) -> str:
        return value or NOT_FOUND

    @model_serializer(mode="wrap")
    def omit_missing_scopes(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        if self.scopes is None:
            data.pop("scopes", None)
        return data
