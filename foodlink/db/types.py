import re

from sqlalchemy.types import String, TypeDecorator

_POINT_RE = re.compile(
    r"^\s*(?:SRID=\d+;)?\s*POINT\s*\(\s*(?P<lng>[-+0-9.eE]+)\s+(?P<lat>[-+0-9.eE]+)\s*\)\s*$",
    re.IGNORECASE,
)


def encode_point(lat: float, lng: float) -> str:
    """WKT text for a point; longitude comes first, as in PostGIS."""
    return f"POINT({float(lng)!r} {float(lat)!r})"


def decode_point(value: str) -> dict:
    match = _POINT_RE.match(value)
    if match is None:
        raise ValueError(f"Not a WKT point: {value!r}")
    return {"lat": float(match.group("lat")), "lng": float(match.group("lng"))}


class GeoPoint(TypeDecorator):
    """Stores ``{"lat": ..., "lng": ...}`` as ``POINT(lng lat)`` text."""

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            decode_point(value)
            return value
        if isinstance(value, dict):
            return encode_point(value["lat"], value["lng"])
        lat, lng = value
        return encode_point(lat, lng)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decode_point(value)
