from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool
import logging
from typing import List

from app.schemas import (
    CanonicalRequest,
    CanonicalResponse,
    LayerSrsOut,
    ResolveRequest,
    SRSRecordOut,
)
from app.crs.layers import LayerRegistry, canonical_layer_srs, meter_units, srid_from_layer
from app.crs.record import NATIVE_SRID, SRSRecord
from app.crs.reference import ReferenceTable
from app.crs.resolver import (
    canonical_srs,
    canonical_srs_list,
    resolve_auth,
    resolve_srid,
    resolve_srs_name,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_reference_table(request: Request) -> ReferenceTable:
    # Apps/tests install the backend on app.state.reference_table
    table = getattr(request.app.state, "reference_table", None)
    if table is None:
        raise HTTPException(status_code=503, detail="No SRS reference table configured")
    return table


def get_layers(request: Request) -> LayerRegistry:
    layers = getattr(request.app.state, "layers", None)
    return layers if layers is not None else LayerRegistry()


def _requested(req: ResolveRequest) -> str:
    if req.srs_name is not None:
        return req.srs_name
    if req.auth_name is not None:
        return f"{req.auth_name}:{req.auth_srid}"
    return str(req.srid)


@router.post("/srs/resolve", response_model=SRSRecordOut)
def srs_resolve(req: ResolveRequest, table: ReferenceTable = Depends(get_reference_table)) -> SRSRecordOut:
    """Resolve a client SRS into its canonical record.

    Body schema (one form only):
      {"srs_name": "urn:ogc:def:crs:EPSG::4326"}
      {"auth_name": "EPSG", "auth_srid": 2154}
      {"srid": 4326}
    """
    srs = SRSRecord()
    if req.srs_name is not None:
        ok = resolve_srs_name(table, srs, req.srs_name)
    elif req.auth_name is not None:
        ok = resolve_auth(table, srs, req.auth_name, req.auth_srid)
    else:
        ok = resolve_srid(table, srs, req.srid)

    if not ok:
        requested = _requested(req)
        logger.info("srs.unsupported", extra={"srs": requested})
        raise HTTPException(status_code=400, detail=f"Unsupported SRS: {requested}")
    logger.debug("srs.resolved", extra={"srs": _requested(req), "srid": srs.internal_id})
    return SRSRecordOut.from_record(srs)


@router.get("/srs/{srid}/canonical")
async def srs_canonical(srid: int, request: Request, table: ReferenceTable = Depends(get_reference_table)):
    """Canonical AUTH:CODE for an SRID; empty string when the table cannot tell."""
    cache = getattr(request.app.state, "cache", None)
    cache_key = f"canonical:{srid}"
    if cache:
        try:
            cached = await cache.get_json(cache_key)
        except Exception:
            cached = None
        if isinstance(cached, dict) and "srs" in cached:
            return cached

    # Table lookups block; keep them off the event loop
    out = {"srid": srid, "srs": await run_in_threadpool(canonical_srs, table, srid)}
    # Empty results are not cached; the table may be fixed later
    if cache and out["srs"]:
        try:
            await cache.set_json(cache_key, out)
        except Exception:
            pass
    return out


@router.post("/srs/canonical", response_model=CanonicalResponse)
def srs_canonical_list(req: CanonicalRequest, table: ReferenceTable = Depends(get_reference_table)) -> CanonicalResponse:
    return CanonicalResponse(srs=canonical_srs_list(table, req.srids))


@router.get("/layers", response_model=List[LayerSrsOut])
def list_layers(
    table: ReferenceTable = Depends(get_reference_table),
    layers: LayerRegistry = Depends(get_layers),
) -> List[LayerSrsOut]:
    canonical = canonical_layer_srs(table, layers)
    out: List[LayerSrsOut] = []
    for layer in layers:
        out.append(LayerSrsOut(
            name=layer.name,
            srid=srid_from_layer(layers, layer.name),
            meter_units=layer.srs.is_linear_units if layer.srs is not None else None,
            srs=canonical.get(layer.name, ""),
        ))
    return out


@router.get("/layers/{name}/srs", response_model=LayerSrsOut)
def layer_srs(
    name: str,
    table: ReferenceTable = Depends(get_reference_table),
    layers: LayerRegistry = Depends(get_layers),
) -> LayerSrsOut:
    layer = layers.get(name)
    if layer is None or layer.srs is None:
        raise HTTPException(status_code=404, detail=f"Layer not configured: {name}")
    srid = srid_from_layer(layers, name)
    return LayerSrsOut(
        name=name,
        srid=srid,
        meter_units=meter_units(layers, name),
        srs=canonical_srs(table, srid) if srid != NATIVE_SRID else "",
    )
