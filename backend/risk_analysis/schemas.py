"""
Compliance risk analysis schemas.

Pydantic models for crypto entity compliance risk scoring across:
- KYC/AML controls
- Security measures
- Custody arrangements
- Trading controls
- Regulatory compliance
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class RiskCategory(str, Enum):
    """Risk categories, valued by their display label."""

    KYC = "KYC/AML Controls"
    SECURITY = "Security Measures"
    CUSTODY = "Custody Arrangements"
    TRADING = "Trading Controls"
    REGULATORY = "Regulatory Compliance"


class RiskLevel(str, Enum):
    """Discrete risk level derived from the overall score."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class JurisdictionTier(str, Enum):
    """Headquarters jurisdiction risk tier."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MissingDataPolicy(str, Enum):
    """How categories without any evaluated factor are aggregated."""

    PENALIZE = "penalize"
    EXCLUDE = "exclude"


# =============================================================================
# Input snapshot
# =============================================================================


class _Section(BaseModel):
    # Unknown keys are rejected
    model_config = ConfigDict(frozen=True, extra="forbid")


class KycVerificationMetrics(_Section):
    """KYC statistics for the entity's user base."""

    verified_users: Optional[int] = Field(None, ge=0)
    non_verified_users: Optional[int] = Field(None, ge=0)
    high_risk_jurisdiction_percentage: Optional[float] = Field(None, ge=0, le=100)


class SanctionsCompliance(_Section):
    """Sanctions framework compliance flags."""

    ofac_compliant: bool = False
    fatf_compliant: bool = False
    eu_compliant: bool = False


class WashTradingDetection(_Section):
    """Market manipulation detection capabilities."""

    automated_bot_detection: bool = False
    spoofing_detection: bool = False


class InsuranceCoverage(_Section):
    """Insurance and security testing."""

    has_insurance: bool = False
    coverage_limit: Optional[float] = Field(None, ge=0, description="Coverage limit in USD")
    last_penetration_test: Optional[date] = None


class CustodyArrangements(_Section):
    """Asset custody setup."""

    cold_storage_percentage: Optional[float] = Field(None, ge=0, le=100)
    hot_wallet_percentage: Optional[float] = Field(None, ge=0, le=100)
    user_fund_segregation: bool = False
    multi_sig_required: bool = False


class HftActivityMetrics(_Section):
    """High-frequency trading activity."""

    hft_bots_allowed: bool = False
    hft_volume_percentage: float = Field(0.0, ge=0, le=100)


class LeverageAndMargin(_Section):
    """Leverage and margin limits."""

    max_leverage: Optional[float] = Field(None, gt=0, description="Maximum leverage multiplier")
    margin_accounts_percentage: Optional[float] = Field(None, ge=0, le=100)


class BlockchainAnalytics(_Section):
    """On-chain analytics and monitoring."""

    real_time_analytics: bool = False
    proof_of_reserves: bool = False
    monitoring_tools: list[str] = Field(default_factory=list)


class EntityComplianceSnapshot(_Section):
    """Compliance posture of one entity at the moment of assessment.

    Every sub-section is optional; a missing sub-section means no data is
    available, and the factors depending on it are skipped.
    """

    entity_name: Optional[str] = Field(None, max_length=200)

    kyc_verification_metrics: Optional[KycVerificationMetrics] = None
    sanctions_compliance: Optional[SanctionsCompliance] = None
    wash_trading_detection: Optional[WashTradingDetection] = None
    insurance_coverage: Optional[InsuranceCoverage] = None
    custody_arrangements: Optional[CustodyArrangements] = None
    hft_activity_metrics: Optional[HftActivityMetrics] = None
    leverage_and_margin: Optional[LeverageAndMargin] = None
    blockchain_analytics: Optional[BlockchainAnalytics] = None

    holds_required_licenses: Optional[bool] = None
    headquarters_location: Optional[str] = Field(None, max_length=200)


# =============================================================================
# Output
# =============================================================================


class RiskFactor(BaseModel):
    """One scored sub-criterion within a category."""

    name: str
    score: float = Field(..., ge=0)
    max_score: float = Field(..., gt=0)
    description: str
    recommendation: Optional[str] = None


class RiskScore(BaseModel):
    """Result for a single risk category."""

    category: RiskCategory
    score: float = Field(..., ge=0, le=100)
    max_score: float = Field(100.0, ge=0, le=100)
    factors: list[RiskFactor] = Field(default_factory=list)


class RiskAssessment(BaseModel):
    """Overall risk assessment for an entity."""

    entity_name: Optional[str] = None
    overall_score: float = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    categories: list[RiskScore]
    timestamp: datetime

    @computed_field
    @property
    def recommendations(self) -> list[str]:
        """All remediation recommendations, in category order."""
        return [
            factor.recommendation
            for category in self.categories
            for factor in category.factors
            if factor.recommendation
        ]

    def category(self, category: RiskCategory) -> RiskScore:
        for score in self.categories:
            if score.category == category:
                return score
        raise KeyError(category)


# =============================================================================
# API schemas
# =============================================================================


class JurisdictionClassification(BaseModel):
    """Jurisdiction lookup result."""

    location: str
    tier: JurisdictionTier
    score: float
    label: str


class BatchAssessmentRequest(BaseModel):
    """Request model for scoring several entities at once."""

    entities: list[EntityComplianceSnapshot] = Field(..., min_length=1, max_length=500)
