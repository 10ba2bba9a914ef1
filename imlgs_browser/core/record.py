from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

SCHEMA_ORG = "https://schema.org/"
SAMPLE_PROPERTY_ID = "https://w3id.org/imlgs/sample"
IMLGS_PROPERTY_ID = "https://w3id.org/imlgs/id"
IGSN_PROPERTY_ID = "https://igsn.org/"

UNIX_EPOCH_JULIAN_DATE = 2440587.5
_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _property_value(property_id: str, value: Any) -> Dict[str, Any]:
    return {"@type": "PropertyValue", "propertyID": property_id, "value": value}


def record_to_jsonld(record: Mapping[str, Any], origin: Optional[str] = None) -> Dict[str, Any]:
    """
    schema.org identifier document for one sample record.

    The IGSN identifier is only added when the record has one.
    """
    jld: Dict[str, Any] = {
        "@context": SCHEMA_ORG,
        "@type": "Thing",
        "isPartOf": origin,
        "identifier": [
            _property_value(SAMPLE_PROPERTY_ID, record.get("sample")),
            _property_value(IMLGS_PROPERTY_ID, record.get("imlgs")),
        ],
        "name": record.get("sample"),
    }
    if record.get("igsn"):
        jld["identifier"].append(_property_value(IGSN_PROPERTY_ID, record["igsn"]))
    return jld


def jd_to_date(jd: Any) -> Any:
    """Julian day number -> "YYYY-MM-DD" (UTC). Empty values pass through."""
    if not jd:
        return jd
    d = _UNIX_EPOCH + timedelta(days=float(jd) - UNIX_EPOCH_JULIAN_DATE)
    return d.strftime("%Y-%m-%d")


def format_dict(d: Any, sep: str = "; ") -> str:
    if not d:
        return ""
    if isinstance(d, Mapping):
        return sep.join(f"{k}: {v}" for k, v in d.items())
    return str(d)


def interval_comment(interval: Mapping[str, Any]) -> str:
    parts = [format_dict(interval.get("int_comments"))]
    if interval.get("description"):
        parts.append(format_dict(interval["description"]))
    if interval.get("remarks"):
        parts.append(format_dict(interval["remarks"]))
    return "; ".join(parts)
