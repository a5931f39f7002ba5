from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from app.crs.record import SRSRecord


class SRSRecordOut(BaseModel):
    """A resolved spatial reference as returned by the API."""

    internal_id: int = Field(description="SRID; -1 for native coordinates")
    authority_name: str = ""
    authority_code: int = 0
    is_linear_units: bool = Field(default=True, description="Meter units when true, degrees otherwise")
    is_reverse_axis: bool = Field(
        default=False, description="Authority axis order (lat/long) implied by the srsName syntax"
    )
    srs: str = Field(default="", description="Canonical AUTH:CODE, empty for native")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "internal_id": 4326,
                "authority_name": "EPSG",
                "authority_code": 4326,
                "is_linear_units": False,
                "is_reverse_axis": True,
                "srs": "EPSG:4326",
            }
        }
    )

    @classmethod
    def from_record(cls, srs: SRSRecord) -> "SRSRecordOut":
        canonical = f"{srs.authority_name}:{srs.authority_code}" if srs.is_set and srs.authority_name else ""
        return cls(
            internal_id=srs.internal_id,
            authority_name=srs.authority_name,
            authority_code=srs.authority_code,
            is_linear_units=srs.is_linear_units,
            is_reverse_axis=srs.is_reverse_axis,
            srs=canonical,
        )


class ResolveRequest(BaseModel):
    """Exactly one of: srs_name, auth_name + auth_srid, srid."""

    srs_name: Optional[str] = None
    auth_name: Optional[str] = None
    auth_srid: Optional[int] = None
    srid: Optional[int] = None

    @model_validator(mode="after")
    def _one_form(self) -> "ResolveRequest":
        forms = [
            self.srs_name is not None,
            self.auth_name is not None or self.auth_srid is not None,
            self.srid is not None,
        ]
        if sum(forms) != 1:
            raise ValueError("provide exactly one of 'srs_name', 'auth_name'+'auth_srid' or 'srid'")
        if forms[1] and (not self.auth_name or self.auth_srid is None):
            raise ValueError("'auth_name' and 'auth_srid' must be given together")
        return self


class CanonicalRequest(BaseModel):
    srids: List[str]

    @field_validator("srids", mode="before")
    @classmethod
    def _coerce_tokens(cls, v):
        if not isinstance(v, list):
            raise ValueError("'srids' must be a list")
        # Tokens stay text; unparsable entries resolve to ''
        return [str(x) for x in v]


class CanonicalResponse(BaseModel):
    srs: List[str] = Field(default_factory=list)


class LayerSrsOut(BaseModel):
    name: str
    srid: int
    meter_units: Optional[bool] = None
    srs: str = ""
