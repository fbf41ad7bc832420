"""
Hashing Module - SHA256 Audit Logic

Canonical JSON serialization and SHA256 hashing for estate projections.
Used to seal projection snapshots and to skip re-writing unchanged results.

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

import hashlib
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict


def canonical_json_dumps(obj: Any) -> str:
    """
    Serialize object to canonical JSON string.

    Ensures deterministic serialization for hashing:
    - Keys sorted alphabetically
    - No whitespace
    - Decimals kept exact as strings
    - Dates as ISO strings; dataclasses and pydantic models as dicts

    Example:
        >>> canonical_json_dumps({"amount": Decimal("123.45"), "date": date(2024, 1, 15)})
        '{"amount":"123.45","date":"2024-01-15"}'
    """
    def default_handler(o):
        if isinstance(o, Decimal):
            return str(o)
        elif isinstance(o, (date, datetime)):
            return o.isoformat()
        elif is_dataclass(o) and not isinstance(o, type):
            return asdict(o)
        elif hasattr(o, "model_dump"):
            return o.model_dump(mode="json")
        else:
            raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    return json.dumps(
        obj,
        sort_keys=True,
        separators=(',', ':'),
        default=default_handler,
        ensure_ascii=True
    )


def calculate_sha256(data: Any) -> str:
    """
    Calculate SHA256 hash of data.

    Returns:
        SHA256 hex digest prefixed with 'sha256:'
    """
    json_str = canonical_json_dumps(data)
    hash_obj = hashlib.sha256(json_str.encode('utf-8'))
    return f"sha256:{hash_obj.hexdigest()}"


def verify_hash(data: Any, expected_hash: str) -> bool:
    return calculate_sha256(data) == expected_hash


def create_audit_entry(event_id: str, inputs: Dict[str, Any], outputs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create an audit trail entry with hash seal.

    The content hash covers inputs and outputs only, so the same calculation
    always carries the same content hash; calculation_hash also seals the
    timestamp.

    Returns:
        Audit entry dict with event_id, timestamp, content_hash,
        calculation_hash, inputs and outputs
    """
    timestamp = datetime.now(timezone.utc)

    content_hash = calculate_sha256({"inputs": inputs, "outputs": outputs})
    calculation_hash = calculate_sha256({
        "event_id": event_id,
        "timestamp": timestamp,
        "inputs": inputs,
        "outputs": outputs
    })

    return {
        "event_id": event_id,
        "timestamp": timestamp.isoformat(),
        "content_hash": content_hash,
        "calculation_hash": calculation_hash,
        "inputs": inputs,
        "outputs": outputs
    }
