"""
JSON Schemas for the HyperLiquid info endpoint payloads we consume.

Only the fields the application reads are required; the exchange is free to
add more. Numeric fields are decimal strings on the wire.
"""

from __future__ import annotations

from typing import Any

import jsonschema

from book_core.errors import ValidationError

_DECIMAL_STRING = {"type": "string", "pattern": r"^-?[0-9]+(\.[0-9]+)?$"}

LEVEL_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["px", "sz"],
    "properties": {"px": _DECIMAL_STRING, "sz": _DECIMAL_STRING, "n": {"type": "integer"}},
}

L2_BOOK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["coin", "levels", "time"],
    "properties": {
        "coin": {"type": "string"},
        "time": {"type": "integer"},
        "levels": {
            "type": "array",
            "minItems": 2,
            "maxItems": 2,
            "items": {"type": "array", "items": LEVEL_SCHEMA},
        },
    },
}

USER_FILL_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["coin", "px", "sz", "side", "time"],
    "properties": {
        "coin": {"type": "string"},
        "px": _DECIMAL_STRING,
        "sz": _DECIMAL_STRING,
        "side": {"enum": ["B", "A"]},
        "time": {"type": "integer"},
        "closedPnl": _DECIMAL_STRING,
        "fee": _DECIMAL_STRING,
        "startPosition": _DECIMAL_STRING,
        "dir": {"type": "string"},
        "oid": {"type": "integer"},
        "tid": {"type": "integer"},
        "hash": {"type": "string"},
        "crossed": {"type": "boolean"},
    },
}

USER_FILLS_SCHEMA: dict[str, Any] = {"type": "array", "items": USER_FILL_SCHEMA}

META_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["universe"],
    "properties": {
        "universe": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "szDecimals"],
                "properties": {
                    "name": {"type": "string"},
                    "szDecimals": {"type": "integer"},
                    "maxLeverage": {"type": "integer"},
                    "onlyIsolated": {"type": "boolean"},
                },
            },
        }
    },
}

USER_STATE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["assetPositions"],
    "properties": {
        "assetPositions": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["position"],
                "properties": {
                    "position": {
                        "type": "object",
                        "required": ["coin", "szi"],
                        "properties": {
                            "coin": {"type": "string"},
                            "szi": {"type": "string"},
                            "entryPx": {"type": ["string", "null"]},
                            "unrealizedPnl": {"type": "string"},
                        },
                    },
                },
            },
        },
        "time": {"type": "integer"},
    },
}


def validate_payload(payload: Any, schema: dict[str, Any], what: str) -> None:
    """Raise ValidationError with the failing path if payload does not match schema."""
    try:
        jsonschema.validate(instance=payload, schema=schema)
    except jsonschema.ValidationError as exc:
        path = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise ValidationError(f"{what}: invalid payload at {path}: {exc.message}") from exc
