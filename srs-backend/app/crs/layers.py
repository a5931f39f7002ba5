from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from .record import NATIVE_SRID, SRSRecord
from .reference import ReferenceTable
from .resolver import canonical_srs


class LayerContractError(AssertionError):
    """A caller asked about a layer it should have validated first."""


@dataclass
class Layer:
    name: str
    srs: Optional[SRSRecord] = None


class LayerRegistry:
    """Configured layers by name, in configuration order."""

    def __init__(self) -> None:
        self._layers: Dict[str, Layer] = {}

    def add(self, name: str, srs: Optional[SRSRecord] = None) -> Layer:
        layer = Layer(name=name, srs=srs)
        self._layers[name] = layer
        return layer

    def get(self, name: str) -> Optional[Layer]:
        return self._layers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._layers

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers.values())

    def __len__(self) -> int:
        return len(self._layers)


def _configured(registry: LayerRegistry, layer_name: str) -> Optional[Layer]:
    layer = registry.get(layer_name)
    if layer is None or not layer.name or layer.srs is None:
        return None
    return layer


def meter_units(registry: LayerRegistry, layer_name: str) -> bool:
    """True when the layer's SRS uses meter units.

    Raises LayerContractError when the layer is unknown or has no SRS record;
    callers check layer existence before asking.
    """
    layer = _configured(registry, layer_name)
    if layer is None:
        raise LayerContractError(f"layer {layer_name!r} is not configured with an SRS")
    return layer.srs.is_linear_units


def srid_from_layer(registry: LayerRegistry, layer_name: str) -> int:
    layer = _configured(registry, layer_name)
    if layer is None:
        return NATIVE_SRID
    return layer.srs.internal_id


def canonical_layer_srs(table: ReferenceTable, registry: LayerRegistry) -> Dict[str, str]:
    # Best effort: unknown or native SRIDs map to ''
    out: Dict[str, str] = {}
    for layer in registry:
        srid = layer.srs.internal_id if layer.srs is not None else NATIVE_SRID
        out[layer.name] = canonical_srs(table, srid) if srid != NATIVE_SRID else ""
    return out


__all__ = [
    "Layer",
    "LayerRegistry",
    "LayerContractError",
    "meter_units",
    "srid_from_layer",
    "canonical_layer_srs",
]
