"""Compliance risk analysis domain."""

from .router import router
from .service import (
    calculate_risk_score,
    assess_entities,
    calculate_weighted_score,
    determine_risk_level,
    months_between,
    utc_now,
)
from .jurisdiction import classify_jurisdiction, jurisdiction_score, jurisdiction_risk_label
from .registration import snapshot_from_registration
from .policy import (
    RiskScoringConfig,
    PolicyLoadError,
    DEFAULT_SCORING_CONFIG,
    load_scoring_config,
    get_scoring_config,
)
from .schemas import (
    RiskCategory,
    RiskLevel,
    JurisdictionTier,
    MissingDataPolicy,
    KycVerificationMetrics,
    SanctionsCompliance,
    WashTradingDetection,
    InsuranceCoverage,
    CustodyArrangements,
    HftActivityMetrics,
    LeverageAndMargin,
    BlockchainAnalytics,
    EntityComplianceSnapshot,
    RiskFactor,
    RiskScore,
    RiskAssessment,
    JurisdictionClassification,
    BatchAssessmentRequest,
)
from .constants import (
    DEFAULT_RISK_WEIGHTS,
    DEFAULT_LEVEL_THRESHOLDS,
    DEFAULT_JURISDICTION_TIERS,
    JURISDICTION_TIER_SCORES,
)

__all__ = [
    # Router
    "router",
    # Service functions
    "calculate_risk_score",
    "assess_entities",
    "calculate_weighted_score",
    "determine_risk_level",
    "months_between",
    "utc_now",
    "classify_jurisdiction",
    "jurisdiction_score",
    "jurisdiction_risk_label",
    "snapshot_from_registration",
    # Policy
    "RiskScoringConfig",
    "PolicyLoadError",
    "DEFAULT_SCORING_CONFIG",
    "load_scoring_config",
    "get_scoring_config",
    # Schemas
    "RiskCategory",
    "RiskLevel",
    "JurisdictionTier",
    "MissingDataPolicy",
    "KycVerificationMetrics",
    "SanctionsCompliance",
    "WashTradingDetection",
    "InsuranceCoverage",
    "CustodyArrangements",
    "HftActivityMetrics",
    "LeverageAndMargin",
    "BlockchainAnalytics",
    "EntityComplianceSnapshot",
    "RiskFactor",
    "RiskScore",
    "RiskAssessment",
    "JurisdictionClassification",
    "BatchAssessmentRequest",
    # Constants
    "DEFAULT_RISK_WEIGHTS",
    "DEFAULT_LEVEL_THRESHOLDS",
    "DEFAULT_JURISDICTION_TIERS",
    "JURISDICTION_TIER_SCORES",
]
