"""PHI redaction for log records"""

import dataclasses
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

# Protected Health Information: never written to logs.
# Matching is by exact key name only.
PHI_FIELDS: frozenset[str] = frozenset(
    {
        "patientName",
        "email",
        "phone",
        "ssn",
        "medicalRecordNumber",
        "dateOfBirth",
        "address",
        "insuranceNumber",
        # snake_case spellings used by Python callers
        "patient_name",
        "medical_record_number",
        "date_of_birth",
        "insurance_number",
    }
)


def is_phi_field(key: Any) -> bool:
    return key in PHI_FIELDS


def _as_mapping(data: Any) -> Mapping | None:
    """Field mapping of a structured record, None for anything else"""
    if isinstance(data, Mapping):
        return data
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    return None


def sanitize(data: Any) -> Any:
    """Return a copy of ``data`` without PHI keys.

    Mappings, pydantic models and dataclass instances come back as a new
    ``dict`` of their top-level fields minus PHI keys. None and anything else
    are returned unchanged. The input is never mutated.
    """
    record = _as_mapping(data)
    if record is None:
        return data

    return {key: value for key, value in record.items() if not is_phi_field(key)}
