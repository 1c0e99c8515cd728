"""
Compliance risk scoring service.

Business logic for weighted multi-factor risk assessment of crypto
entities across:
- KYC/AML controls (verification rate, jurisdiction exposure, sanctions)
- Security measures (manipulation detection, insurance, penetration testing)
- Custody arrangements (cold storage, fund segregation, multi-signature)
- Trading controls (HFT activity, leverage, market monitoring)
- Regulatory compliance (licensing, compliance tooling, jurisdiction)

Each category is scored out of 100 from its factors; the overall score is
the weighted sum of category completion ratios.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .constants import (
    CUSTODY_COLD_STORAGE_MAX,
    CUSTODY_MULTISIG_MAX,
    CUSTODY_SEGREGATION_MAX,
    DEFAULT_LEVEL_THRESHOLDS,
    DEFAULT_RISK_WEIGHTS,
    HFT_VOLUME_CAP_PCT,
    HIGH_RISK_EXPOSURE_LIMIT_PCT,
    KYC_JURISDICTION_EXPOSURE_MAX,
    KYC_SANCTIONS_MAX,
    KYC_VERIFICATION_MAX,
    LEVERAGE_CAP,
    MAX_CATEGORY_SCORE,
    PENETRATION_TEST_INTERVAL_MONTHS,
    REGULATORY_JURISDICTION_MAX,
    REGULATORY_LICENSING_MAX,
    REGULATORY_TOOLS_MAX,
    SECURITY_DETECTION_MAX,
    SECURITY_INSURANCE_MAX,
    SECURITY_TESTING_MAX,
    TARGET_COLD_STORAGE_PCT,
    TARGET_VERIFICATION_RATIO,
    TRADING_HFT_MAX,
    TRADING_LEVERAGE_MAX,
    TRADING_MONITORING_MAX,
)
from .jurisdiction import jurisdiction_risk_label, jurisdiction_score
from .policy import DEFAULT_SCORING_CONFIG, RiskScoringConfig
from .schemas import (
    EntityComplianceSnapshot,
    MissingDataPolicy,
    RiskAssessment,
    RiskCategory,
    RiskFactor,
    RiskLevel,
    RiskScore,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def _factor(
    name: str,
    score: float,
    max_score: float,
    description: str,
    recommendation: Optional[str] = None,
) -> RiskFactor:
    # A recommendation only accompanies a factor that fell short
    return RiskFactor(
        name=name,
        score=score,
        max_score=max_score,
        description=description,
        recommendation=recommendation if score < max_score else None,
    )


def _category_score(
    category: RiskCategory,
    factors: list[RiskFactor],
    policy: MissingDataPolicy,
) -> RiskScore:
    total = sum(f.score for f in factors)
    if policy == MissingDataPolicy.EXCLUDE:
        max_score = sum(f.max_score for f in factors)
    else:
        max_score = MAX_CATEGORY_SCORE
    score = RiskScore(
        category=category,
        score=min(total, max_score),
        max_score=max_score,
        factors=factors,
    )
    logger.debug(
        "%s: %.1f/%.0f from %d factor(s)", category.value, score.score, score.max_score, len(factors)
    )
    return score


def months_between(start: date, end: date) -> int:
    """Whole calendar months elapsed from ``start`` to ``end`` (never negative)."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(0, months)


# =============================================================================
# Category assessors
# =============================================================================


def _assess_kyc_risk(entity: EntityComplianceSnapshot) -> list[RiskFactor]:
    """Assess KYC/AML controls."""
    factors = []

    metrics = entity.kyc_verification_metrics
    if metrics is not None:
        verified = metrics.verified_users or 0
        total_users = verified + (metrics.non_verified_users or 0)
        # No users reported: the rate is undefined, so the factor is skipped
        if total_users > 0:
            ratio = verified / total_users
            factors.append(_factor(
                "KYC Verification Rate",
                ratio * KYC_VERIFICATION_MAX,
                KYC_VERIFICATION_MAX,
                f"{ratio * 100:.1f}% of users are KYC verified",
                f"Increase KYC verification rate to at least {TARGET_VERIFICATION_RATIO:.0%}"
                if ratio < TARGET_VERIFICATION_RATIO else None,
            ))

        pct = metrics.high_risk_jurisdiction_percentage
        if pct is not None:
            factors.append(_factor(
                "High-Risk Jurisdiction Exposure",
                max(0.0, KYC_JURISDICTION_EXPOSURE_MAX - pct * 2),
                KYC_JURISDICTION_EXPOSURE_MAX,
                f"{pct:.1f}% of users are from high-risk jurisdictions",
                "Apply enhanced due diligence to users from high-risk jurisdictions"
                if pct > HIGH_RISK_EXPOSURE_LIMIT_PCT else None,
            ))

    sanctions = entity.sanctions_compliance
    if sanctions is not None:
        frameworks = {
            "OFAC": sanctions.ofac_compliant,
            "FATF": sanctions.fatf_compliant,
            "EU": sanctions.eu_compliant,
        }
        compliant = sum(frameworks.values())
        missing = [name for name, ok in frameworks.items() if not ok]
        factors.append(_factor(
            "Sanctions Compliance",
            10.0 * compliant,
            KYC_SANCTIONS_MAX,
            f"Compliant with {compliant}/{len(frameworks)} major sanctions frameworks",
            f"Achieve full sanctions compliance (missing: {', '.join(missing)})" if missing else None,
        ))

    return factors


def _assess_security_risk(entity: EntityComplianceSnapshot, as_of: date) -> list[RiskFactor]:
    """Assess security measures."""
    factors = []

    detection = entity.wash_trading_detection
    if detection is not None:
        active = int(detection.automated_bot_detection) + int(detection.spoofing_detection)
        factors.append(_factor(
            "Market Manipulation Detection",
            20.0 * active,
            SECURITY_DETECTION_MAX,
            f"{active}/2 manipulation detection systems active",
            "Implement automated bot and spoofing detection",
        ))

    insurance = entity.insurance_coverage
    if insurance is not None:
        if insurance.has_insurance:
            description = "Insurance coverage in place"
            if insurance.coverage_limit is not None:
                description += f" (limit ${insurance.coverage_limit:,.0f})"
        else:
            description = "No insurance coverage"
        factors.append(_factor(
            "Insurance Coverage",
            SECURITY_INSURANCE_MAX if insurance.has_insurance else 0.0,
            SECURITY_INSURANCE_MAX,
            description,
            "Obtain insurance coverage for custodied assets",
        ))

        if insurance.last_penetration_test is not None:
            months = months_between(insurance.last_penetration_test, as_of)
            if months <= PENETRATION_TEST_INTERVAL_MONTHS:
                testing_score = SECURITY_TESTING_MAX
            elif months <= 12:
                testing_score = 15.0
            else:
                testing_score = 0.0
            factors.append(_factor(
                "Security Testing",
                testing_score,
                SECURITY_TESTING_MAX,
                f"Last penetration test {months} month(s) ago",
                f"Conduct penetration testing at least every {PENETRATION_TEST_INTERVAL_MONTHS} months"
                if months > PENETRATION_TEST_INTERVAL_MONTHS else None,
            ))

    return factors


def _assess_custody_risk(entity: EntityComplianceSnapshot) -> list[RiskFactor]:
    """Assess custody arrangements."""
    factors = []

    custody = entity.custody_arrangements
    if custody is None:
        return factors

    pct = custody.cold_storage_percentage
    if pct is not None:
        if pct >= 95:
            cold_score = 40.0
        elif pct >= 90:
            cold_score = 30.0
        elif pct >= 80:
            cold_score = 20.0
        else:
            cold_score = 10.0
        factors.append(_factor(
            "Cold Storage Usage",
            cold_score,
            CUSTODY_COLD_STORAGE_MAX,
            f"{pct:g}% of assets in cold storage",
            f"Increase cold storage allocation to at least {TARGET_COLD_STORAGE_PCT:g}% of assets"
            if pct < TARGET_COLD_STORAGE_PCT else None,
        ))

    factors.append(_factor(
        "Fund Segregation",
        CUSTODY_SEGREGATION_MAX if custody.user_fund_segregation else 0.0,
        CUSTODY_SEGREGATION_MAX,
        "User funds are segregated" if custody.user_fund_segregation else "No fund segregation implemented",
        "Implement complete segregation of user funds",
    ))

    factors.append(_factor(
        "Multi-Signature Controls",
        CUSTODY_MULTISIG_MAX if custody.multi_sig_required else 0.0,
        CUSTODY_MULTISIG_MAX,
        "Multi-signature approval required for withdrawals"
        if custody.multi_sig_required else "No multi-signature requirement",
        "Require multi-signature approval for wallet operations",
    ))

    return factors


def _assess_trading_risk(entity: EntityComplianceSnapshot) -> list[RiskFactor]:
    """Assess trading controls."""
    factors = []

    hft = entity.hft_activity_metrics
    if hft is not None:
        volume = hft.hft_volume_percentage
        if not hft.hft_bots_allowed:
            hft_score = 40.0
            description = "HFT bots are not permitted"
        else:
            if volume <= 30:
                hft_score = 40.0
            elif volume <= 50:
                hft_score = 30.0
            else:
                hft_score = 20.0
            description = f"HFT accounts for {volume:g}% of trading volume"
        factors.append(_factor(
            "HFT Activity",
            hft_score,
            TRADING_HFT_MAX,
            description,
            f"Cap HFT volume at {HFT_VOLUME_CAP_PCT:g}% of total trading volume"
            if hft.hft_bots_allowed and volume > HFT_VOLUME_CAP_PCT else None,
        ))

    leverage = entity.leverage_and_margin
    if leverage is not None and leverage.max_leverage is not None:
        max_leverage = leverage.max_leverage
        if max_leverage <= 5:
            leverage_score = 30.0
        elif max_leverage <= 10:
            leverage_score = 20.0
        elif max_leverage <= 20:
            leverage_score = 10.0
        else:
            leverage_score = 0.0
        factors.append(_factor(
            "Leverage Limits",
            leverage_score,
            TRADING_LEVERAGE_MAX,
            f"Maximum leverage of {max_leverage:g}x",
            f"Cap maximum leverage at {LEVERAGE_CAP:g}x" if max_leverage > LEVERAGE_CAP else None,
        ))

    analytics = entity.blockchain_analytics
    if analytics is not None:
        active = int(analytics.real_time_analytics) + int(analytics.proof_of_reserves)
        factors.append(_factor(
            "Market Monitoring",
            15.0 * active,
            TRADING_MONITORING_MAX,
            f"{active}/2 monitoring capabilities (real-time analytics, proof of reserves)",
            "Enable real-time analytics and publish proof of reserves",
        ))

    return factors


def _assess_regulatory_risk(
    entity: EntityComplianceSnapshot,
    config: RiskScoringConfig,
) -> list[RiskFactor]:
    """Assess regulatory compliance."""
    factors = []

    if entity.holds_required_licenses is not None:
        licensed = entity.holds_required_licenses
        factors.append(_factor(
            "Regulatory Licensing",
            REGULATORY_LICENSING_MAX if licensed else 0.0,
            REGULATORY_LICENSING_MAX,
            "Has required regulatory licenses" if licensed else "Missing regulatory licenses",
            "Obtain necessary regulatory licenses",
        ))

    analytics = entity.blockchain_analytics
    if analytics is not None:
        tool_count = len(analytics.monitoring_tools)
        if tool_count >= 3:
            tools_score = 30.0
        elif tool_count >= 2:
            tools_score = 20.0
        elif tool_count >= 1:
            tools_score = 10.0
        else:
            tools_score = 0.0
        factors.append(_factor(
            "Compliance Tools",
            tools_score,
            REGULATORY_TOOLS_MAX,
            f"Using {tool_count} blockchain monitoring tool(s)",
            "Implement additional blockchain monitoring tools",
        ))

    if entity.headquarters_location is not None:
        score = jurisdiction_score(
            entity.headquarters_location, config.jurisdiction_tiers, config.tier_scores
        )
        factors.append(_factor(
            "Jurisdiction Risk",
            min(score, REGULATORY_JURISDICTION_MAX),
            REGULATORY_JURISDICTION_MAX,
            f"Jurisdiction risk assessment: {jurisdiction_risk_label(score, config.tier_scores)}",
            "Consider establishing presence in well-regulated jurisdictions",
        ))

    return factors


# =============================================================================
# Aggregation
# =============================================================================


def calculate_weighted_score(
    categories: Iterable[RiskScore],
    weights: Optional[Mapping[RiskCategory, float]] = None,
    policy: MissingDataPolicy = MissingDataPolicy.PENALIZE,
) -> float:
    """
    Combine category results into an overall 0-100 score.

    Each category contributes ``score / max_score * weight * 100``. Under the
    EXCLUDE policy, categories without factors are dropped and the remaining
    weights are renormalized.
    """
    weights = DEFAULT_RISK_WEIGHTS if weights is None else weights
    categories = list(categories)

    if policy == MissingDataPolicy.EXCLUDE:
        categories = [c for c in categories if c.factors and c.max_score > 0]
        total_weight = sum(weights[c.category] for c in categories)
        if total_weight == 0:
            return 0.0
    else:
        total_weight = 1.0

    overall = sum(
        (c.score / c.max_score) * weights[c.category] * 100
        for c in categories
    ) / total_weight
    return min(100.0, max(0.0, overall))


def determine_risk_level(
    score: float,
    thresholds: Optional[Iterable[tuple[float, RiskLevel]]] = None,
) -> RiskLevel:
    """Map an overall score to a risk level; lower bounds are inclusive."""
    thresholds = DEFAULT_LEVEL_THRESHOLDS if thresholds is None else thresholds
    for bound, level in thresholds:
        if score >= bound:
            return level
    return RiskLevel.CRITICAL


def calculate_risk_score(
    entity: Union[EntityComplianceSnapshot, Mapping[str, Any]],
    config: Optional[RiskScoringConfig] = None,
    clock: Optional[Clock] = None,
) -> RiskAssessment:
    """
    Assess the compliance risk of a crypto entity.

    Args:
        entity: Compliance snapshot, or a mapping validated into one
        config: Scoring policy (defaults to the built-in policy)
        clock: Returns the assessment time; read once per call

    Returns:
        RiskAssessment with per-category factors and the overall risk level

    Raises:
        pydantic.ValidationError: If a mapping does not describe a valid snapshot
    """
    if not isinstance(entity, EntityComplianceSnapshot):
        entity = EntityComplianceSnapshot.model_validate(entity)
    config = DEFAULT_SCORING_CONFIG if config is None else config
    now = (clock or utc_now)()
    policy = config.missing_data_policy

    categories = [
        _category_score(RiskCategory.KYC, _assess_kyc_risk(entity), policy),
        _category_score(RiskCategory.SECURITY, _assess_security_risk(entity, now.date()), policy),
        _category_score(RiskCategory.CUSTODY, _assess_custody_risk(entity), policy),
        _category_score(RiskCategory.TRADING, _assess_trading_risk(entity), policy),
        _category_score(RiskCategory.REGULATORY, _assess_regulatory_risk(entity, config), policy),
    ]

    overall_score = calculate_weighted_score(categories, config.weights, policy)
    risk_level = determine_risk_level(overall_score, config.level_thresholds)

    logger.info(
        "Risk assessment for %s: %.1f (%s)",
        entity.entity_name or "<unnamed entity>", overall_score, risk_level.value,
    )

    return RiskAssessment(
        entity_name=entity.entity_name,
        overall_score=overall_score,
        risk_level=risk_level,
        categories=categories,
        timestamp=now,
    )


def assess_entities(
    entities: Iterable[Union[EntityComplianceSnapshot, Mapping[str, Any]]],
    config: Optional[RiskScoringConfig] = None,
    clock: Optional[Clock] = None,
) -> list[RiskAssessment]:
    """Assess several entities independently, preserving input order."""
    return [calculate_risk_score(entity, config=config, clock=clock) for entity in entities]
