"""
Exchange registration adapter.

Maps an exchange registration record as stored by the compliance portal
(camelCase keys, compliance data grouped into JSON sections such as
``kycVerificationMetrics`` and ``custodyArrangements``) onto an
EntityComplianceSnapshot.
"""

import re
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from .schemas import (
    BlockchainAnalytics,
    CustodyArrangements,
    EntityComplianceSnapshot,
    HftActivityMetrics,
    InsuranceCoverage,
    KycVerificationMetrics,
    LeverageAndMargin,
    SanctionsCompliance,
    WashTradingDetection,
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Registration sections carried over to the snapshot, with their models
SNAPSHOT_SECTIONS: dict[str, type[BaseModel]] = {
    "kycVerificationMetrics": KycVerificationMetrics,
    "sanctionsCompliance": SanctionsCompliance,
    "washTradingDetection": WashTradingDetection,
    "insuranceCoverage": InsuranceCoverage,
    "custodyArrangements": CustodyArrangements,
    "hftActivityMetrics": HftActivityMetrics,
    "leverageAndMargin": LeverageAndMargin,
    "blockchainAnalytics": BlockchainAnalytics,
}


def to_snake_case(name: str) -> str:
    """Convert a camelCase key to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _section(
    record: Mapping[str, Any],
    key: str,
    model: Optional[type[BaseModel]] = None,
) -> Optional[dict[str, Any]]:
    value = record.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValueError(f"Registration section '{key}' must be an object")
    section = {to_snake_case(k): v for k, v in value.items()}
    if model is None:
        return section
    # Portal-only fields (e.g. timeStampGranularity) have no snapshot counterpart
    return {k: v for k, v in section.items() if k in model.model_fields}


def _parse_test_date(value: Any) -> Any:
    # Timestamps are stored as ISO strings, sometimes with a time component
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


def _licensed(value: Any) -> Optional[bool]:
    # The portal stores licenses as free text; any non-blank entry counts
    if value is None:
        return None
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def snapshot_from_registration(record: Mapping[str, Any]) -> EntityComplianceSnapshot:
    """
    Build a compliance snapshot from an exchange registration record.

    Keys without a snapshot counterpart are dropped. ``multiSigRequired``
    is read from the custody section, falling back to the registration's
    ``securityMeasures``.

    Raises:
        ValueError: If a section has the wrong shape
        pydantic.ValidationError: If field values violate snapshot constraints
    """
    data: dict[str, Any] = {
        to_snake_case(key): _section(record, key, model) for key, model in SNAPSHOT_SECTIONS.items()
    }

    security = _section(record, "securityMeasures") or {}
    custody = data.get("custody_arrangements")
    if custody is not None and "multi_sig_required" not in custody and "multi_sig_required" in security:
        custody["multi_sig_required"] = security["multi_sig_required"]

    insurance = data.get("insurance_coverage")
    if insurance is not None and "last_penetration_test" in insurance:
        insurance["last_penetration_test"] = _parse_test_date(insurance["last_penetration_test"])

    data["entity_name"] = record.get("exchangeName") or record.get("legalEntityName")
    data["holds_required_licenses"] = _licensed(record.get("regulatoryLicenses"))
    data["headquarters_location"] = record.get("headquartersLocation")

    return EntityComplianceSnapshot.model_validate(data)
