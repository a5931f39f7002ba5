from __future__ import annotations

from dataclasses import dataclass, replace

# Reserved SRID meaning "no SRS / native coordinates, no reprojection"
NATIVE_SRID = -1


@dataclass
class SRSRecord:
    """Resolved (or unset) spatial reference attached to a layer or request.

    Only `internal_id` is authoritative; the other fields are coherent with it
    after a successful resolve.
    """

    internal_id: int = NATIVE_SRID
    authority_name: str = ""
    authority_code: int = 0
    is_linear_units: bool = True
    is_reverse_axis: bool = False

    @property
    def is_set(self) -> bool:
        return self.internal_id != NATIVE_SRID

    def reset(self) -> None:
        self.internal_id = NATIVE_SRID
        self.authority_name = ""
        self.authority_code = 0
        self.is_linear_units = True
        self.is_reverse_axis = False

    def copy(self) -> "SRSRecord":
        return replace(self)

    def commit(self, other: "SRSRecord") -> None:
        """Overwrite every field with the values of `other`."""
        self.internal_id = other.internal_id
        self.authority_name = other.authority_name
        self.authority_code = other.authority_code
        self.is_linear_units = other.is_linear_units
        self.is_reverse_axis = other.is_reverse_axis


__all__ = ["SRSRecord", "NATIVE_SRID"]
