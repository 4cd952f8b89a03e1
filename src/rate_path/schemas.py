"""JSON Schema for the YAML service configuration."""
from __future__ import annotations

CONFIG_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "algebra": {"type": "string", "enum": ["max_product", "min_sum"]},
        "link_venues": {"type": "boolean"},
        "vectorize": {"type": ["boolean", "null"]},
        "strict": {"type": "boolean"},
        "rate_format": {"type": "string", "minLength": 2},
        "missing_rate_text": {"type": "string", "minLength": 1},
        "log_level": {
            "type": "string",
            "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        },
    },
    "additionalProperties": False,
}
