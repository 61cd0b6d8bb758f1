"""
Facet beans exchanged with the gateway.

Backends speak camelCase JSON (`patId`, `riskLevel`, `defaultMessage`); the models
expose snake_case attributes and serialize back with the backend field names.

Fields are optional where a form submission may leave them blank: the backends own
validation (they answer 400 with field errors), the client only has to be able to
hold an invalid draft and show it again.
"""

from datetime import date
from pydantic import BaseModel, ConfigDict, Field, field_validator


class GatewayBean(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        """JSON-ready dict using the backend field names."""
        return self.model_dump(mode="json", by_alias=True)


class Patient(GatewayBean):
    id: int | None = None
    lastname: str | None = None
    firstname: str | None = None
    dateofbirth: date | None = None
    gender: str | None = None
    address: str | None = None
    phone: str | None = None

    # HTML forms send "" for untouched inputs
    @field_validator("*", mode="before")
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Note(GatewayBean):
    pat_id: int | None = Field(default=None, alias="patId")
    patient: str | None = None
    note: str | None = None


class RiskLevel(GatewayBean):
    risk_level: str = Field(default="Undefined", alias="riskLevel")
    pat_id: int | None = Field(default=None, alias="patId")


class ValidationErrorDetail(BaseModel):
    """One element of a backend 400 body: `{"field": ..., "defaultMessage": ...}`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field: str
    default_message: str = Field(alias="defaultMessage")


UNDEFINED_RISK = "Undefined"


__all__ = ["Patient", "Note", "RiskLevel", "ValidationErrorDetail", "UNDEFINED_RISK"]
