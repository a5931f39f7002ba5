"""SRS (Spatial Reference System) resolution for OGC service requests.

Modules:
 - record: SRSRecord, the resolved (or native) reference of a layer/request
 - srsname: recognition of EPSG:, urn: and http: srsName spellings
 - reference: reference table capability and in-memory backend
 - postgis: spatial_ref_sys backend over psycopg2
 - epsg_catalog: built-in rows used without a database
 - resolver: authority/SRID/srsName resolution and canonical strings
 - layers: layer registry and per-layer SRS queries
 - diagnostics: record dumps for logs and tools
"""

__all__ = [
    "record",
    "srsname",
    "reference",
    "resolver",
    "layers",
]
