"""
Compliance risk scoring constants.

Default scoring policy: category weights, risk level thresholds and the
headquarters jurisdiction classification.
"""

from .schemas import JurisdictionTier, RiskCategory, RiskLevel

# Every category is scored out of 100
MAX_CATEGORY_SCORE = 100.0

# Category weights (sum to 1.0)
DEFAULT_RISK_WEIGHTS: dict[RiskCategory, float] = {
    RiskCategory.KYC: 0.25,
    RiskCategory.SECURITY: 0.25,
    RiskCategory.CUSTODY: 0.20,
    RiskCategory.TRADING: 0.15,
    RiskCategory.REGULATORY: 0.15,
}

# Inclusive lower bounds, highest first. Anything below the last bound is Critical.
DEFAULT_LEVEL_THRESHOLDS: list[tuple[float, RiskLevel]] = [
    (80.0, RiskLevel.LOW),
    (60.0, RiskLevel.MEDIUM),
    (40.0, RiskLevel.HIGH),
]

# Lowercase name fragments matched as substrings of the headquarters location
DEFAULT_JURISDICTION_TIERS: dict[str, JurisdictionTier] = {
    "united states": JurisdictionTier.LOW,
    "singapore": JurisdictionTier.LOW,
    "japan": JurisdictionTier.LOW,
    "united kingdom": JurisdictionTier.LOW,
    "switzerland": JurisdictionTier.LOW,
    "european union": JurisdictionTier.LOW,
    "australia": JurisdictionTier.LOW,
    "canada": JurisdictionTier.LOW,
    "hong kong": JurisdictionTier.MEDIUM,
    "south korea": JurisdictionTier.MEDIUM,
    "uae": JurisdictionTier.MEDIUM,
    "brazil": JurisdictionTier.MEDIUM,
    "malaysia": JurisdictionTier.MEDIUM,
}

JURISDICTION_TIER_SCORES: dict[JurisdictionTier, float] = {
    JurisdictionTier.LOW: 30.0,
    JurisdictionTier.MEDIUM: 20.0,
    JurisdictionTier.HIGH: 10.0,
}

JURISDICTION_TIER_LABELS: dict[JurisdictionTier, str] = {
    JurisdictionTier.LOW: "Low Risk",
    JurisdictionTier.MEDIUM: "Medium Risk",
    JurisdictionTier.HIGH: "High Risk",
}

# Factor maxima
KYC_VERIFICATION_MAX = 30.0
KYC_JURISDICTION_EXPOSURE_MAX = 40.0
KYC_SANCTIONS_MAX = 30.0

SECURITY_DETECTION_MAX = 40.0
SECURITY_INSURANCE_MAX = 30.0
SECURITY_TESTING_MAX = 30.0

CUSTODY_COLD_STORAGE_MAX = 40.0
CUSTODY_SEGREGATION_MAX = 30.0
CUSTODY_MULTISIG_MAX = 30.0

TRADING_HFT_MAX = 40.0
TRADING_LEVERAGE_MAX = 30.0
TRADING_MONITORING_MAX = 30.0

REGULATORY_LICENSING_MAX = 40.0
REGULATORY_TOOLS_MAX = 30.0
REGULATORY_JURISDICTION_MAX = 30.0

# Remediation targets
TARGET_VERIFICATION_RATIO = 0.8
HIGH_RISK_EXPOSURE_LIMIT_PCT = 15.0
TARGET_COLD_STORAGE_PCT = 95.0
HFT_VOLUME_CAP_PCT = 30.0
LEVERAGE_CAP = 5.0
PENETRATION_TEST_INTERVAL_MONTHS = 6
