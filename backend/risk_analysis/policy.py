"""
Risk scoring policy.

The weights, level thresholds and jurisdiction table are policy decisions,
so they live in a config object that callers can replace or load from YAML.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .constants import (
    DEFAULT_JURISDICTION_TIERS,
    DEFAULT_LEVEL_THRESHOLDS,
    DEFAULT_RISK_WEIGHTS,
    JURISDICTION_TIER_SCORES,
)
from .schemas import JurisdictionTier, MissingDataPolicy, RiskCategory, RiskLevel

logger = logging.getLogger(__name__)


class PolicyLoadError(ValueError):
    """Raised when a scoring policy file cannot be read or is invalid."""


class RiskScoringConfig(BaseModel):
    """Injectable scoring policy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    weights: dict[RiskCategory, float] = Field(default_factory=lambda: dict(DEFAULT_RISK_WEIGHTS))
    level_thresholds: list[tuple[float, RiskLevel]] = Field(
        default_factory=lambda: list(DEFAULT_LEVEL_THRESHOLDS)
    )
    jurisdiction_tiers: dict[str, JurisdictionTier] = Field(
        default_factory=lambda: dict(DEFAULT_JURISDICTION_TIERS)
    )
    # Scores above the jurisdiction factor maximum (30) are capped when scoring
    tier_scores: dict[JurisdictionTier, float] = Field(
        default_factory=lambda: dict(JURISDICTION_TIER_SCORES)
    )
    missing_data_policy: MissingDataPolicy = MissingDataPolicy.PENALIZE

    @field_validator("weights")
    @classmethod
    def _check_weights(cls, weights: dict[RiskCategory, float]) -> dict[RiskCategory, float]:
        missing = [c.value for c in RiskCategory if c not in weights]
        if missing:
            raise ValueError(f"Missing weights for: {', '.join(missing)}")
        if any(w < 0 for w in weights.values()):
            raise ValueError("Category weights must be non-negative")
        total = sum(weights.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Category weights must sum to 1.0, got {total}")
        return weights

    @field_validator("level_thresholds")
    @classmethod
    def _check_thresholds(cls, thresholds: list[tuple[float, RiskLevel]]) -> list[tuple[float, RiskLevel]]:
        bounds = [bound for bound, _ in thresholds]
        if any(b < 0 or b > 100 for b in bounds):
            raise ValueError("Level thresholds must be within 0-100")
        if any(a <= b for a, b in zip(bounds, bounds[1:])):
            raise ValueError("Level thresholds must be strictly descending")
        return thresholds

    @field_validator("jurisdiction_tiers")
    @classmethod
    def _normalize_fragments(cls, tiers: dict[str, JurisdictionTier]) -> dict[str, JurisdictionTier]:
        normalized = {}
        for fragment, tier in tiers.items():
            key = fragment.strip().lower()
            if not key:
                raise ValueError("Jurisdiction fragments must be non-empty")
            normalized[key] = tier
        return normalized

    @model_validator(mode="after")
    def _check_tier_scores(self) -> RiskScoringConfig:
        missing = [t.value for t in JurisdictionTier if t not in self.tier_scores]
        if missing:
            raise ValueError(f"Missing tier scores for: {', '.join(missing)}")
        scores = [self.tier_scores[t] for t in JurisdictionTier]
        if any(s < 0 for s in scores):
            raise ValueError("Jurisdiction tier scores must be non-negative")
        if any(a <= b for a, b in zip(scores, scores[1:])):
            raise ValueError("Jurisdiction tier scores must descend from low to high risk")
        return self


DEFAULT_SCORING_CONFIG = RiskScoringConfig()


def load_scoring_config(path: str | Path) -> RiskScoringConfig:
    """Load a scoring policy from a YAML file.

    Keys left out of the file keep their defaults. Weights are keyed by
    category label (e.g. ``KYC/AML Controls``).

    Raises:
        PolicyLoadError: If the file is missing, is not valid YAML, or
            describes an invalid policy.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
    except OSError as e:
        raise PolicyLoadError(f"Cannot read scoring policy {path}: {e}") from e
    except yaml.YAMLError as e:
        raise PolicyLoadError(f"Invalid YAML in scoring policy {path}: {e}") from e

    if not isinstance(content, dict):
        raise PolicyLoadError(f"Scoring policy {path} must be a mapping")

    try:
        config = RiskScoringConfig.model_validate(content)
    except ValidationError as e:
        raise PolicyLoadError(f"Invalid scoring policy {path}: {e}") from e

    logger.info("Loaded scoring policy from %s", path)
    return config


@lru_cache
def get_scoring_config(path: str | None = None) -> RiskScoringConfig:
    """Get the cached scoring policy for a file, or the default policy."""
    if path is None:
        return DEFAULT_SCORING_CONFIG
    return load_scoring_config(path)
