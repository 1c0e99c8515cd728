"""Headquarters jurisdiction risk classification."""

from typing import Mapping, Optional

from .constants import (
    DEFAULT_JURISDICTION_TIERS,
    JURISDICTION_TIER_LABELS,
    JURISDICTION_TIER_SCORES,
)
from .schemas import JurisdictionTier

# Tiers are matched best first; HIGH is the fallback
_MATCH_ORDER = (JurisdictionTier.LOW, JurisdictionTier.MEDIUM)


def classify_jurisdiction(
    location: str,
    table: Optional[Mapping[str, JurisdictionTier]] = None,
) -> JurisdictionTier:
    """
    Classify a headquarters location by case-insensitive substring match.

    "United States of America" matches the "united states" fragment.
    Empty or unrecognized locations fall through to the high-risk tier.
    """
    table = DEFAULT_JURISDICTION_TIERS if table is None else table
    location = location.lower()
    if location.strip():
        for tier in _MATCH_ORDER:
            if any(fragment in location for fragment, t in table.items() if t == tier):
                return tier
    return JurisdictionTier.HIGH


def jurisdiction_score(
    location: str,
    table: Optional[Mapping[str, JurisdictionTier]] = None,
    tier_scores: Optional[Mapping[JurisdictionTier, float]] = None,
) -> float:
    """Score a headquarters location (30 low, 20 medium, 10 high risk)."""
    tier_scores = JURISDICTION_TIER_SCORES if tier_scores is None else tier_scores
    return tier_scores[classify_jurisdiction(location, table)]


def jurisdiction_risk_label(
    score: float,
    tier_scores: Optional[Mapping[JurisdictionTier, float]] = None,
) -> str:
    """Human-readable risk label for a jurisdiction score under the given tier scores."""
    tier_scores = JURISDICTION_TIER_SCORES if tier_scores is None else tier_scores
    if score >= tier_scores[JurisdictionTier.LOW]:
        return JURISDICTION_TIER_LABELS[JurisdictionTier.LOW]
    if score >= tier_scores[JurisdictionTier.MEDIUM]:
        return JURISDICTION_TIER_LABELS[JurisdictionTier.MEDIUM]
    return JURISDICTION_TIER_LABELS[JurisdictionTier.HIGH]
