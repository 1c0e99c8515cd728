"""Tests for scoring policy configuration and jurisdiction classification."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from backend.risk_analysis import (
    DEFAULT_JURISDICTION_TIERS,
    DEFAULT_SCORING_CONFIG,
    EntityComplianceSnapshot,
    JurisdictionTier,
    MissingDataPolicy,
    PolicyLoadError,
    RiskCategory,
    RiskLevel,
    RiskScoringConfig,
    calculate_risk_score,
    classify_jurisdiction,
    jurisdiction_risk_label,
    jurisdiction_score,
    load_scoring_config,
)


# =============================================================================
# Config Validation Tests
# =============================================================================


class TestRiskScoringConfig:
    """Tests for RiskScoringConfig validation."""

    def test_defaults(self):
        """Default policy matches the built-in tables."""
        config = RiskScoringConfig()
        assert config.weights[RiskCategory.KYC] == 0.25
        assert config.weights[RiskCategory.REGULATORY] == 0.15
        assert config.missing_data_policy == MissingDataPolicy.PENALIZE
        assert config.level_thresholds[0] == (80.0, RiskLevel.LOW)

    def test_weights_must_sum_to_one(self):
        weights = dict(DEFAULT_SCORING_CONFIG.weights)
        weights[RiskCategory.KYC] = 0.5
        with pytest.raises(ValidationError) as exc_info:
            RiskScoringConfig(weights=weights)
        assert "sum to 1.0" in str(exc_info.value)

    def test_weights_must_cover_all_categories(self):
        with pytest.raises(ValidationError) as exc_info:
            RiskScoringConfig(weights={RiskCategory.KYC: 1.0})
        assert "Missing weights" in str(exc_info.value)

    def test_negative_weight_rejected(self):
        weights = dict(DEFAULT_SCORING_CONFIG.weights)
        weights[RiskCategory.KYC] = -0.25
        weights[RiskCategory.SECURITY] = 0.75
        with pytest.raises(ValidationError):
            RiskScoringConfig(weights=weights)

    def test_thresholds_must_descend(self):
        with pytest.raises(ValidationError):
            RiskScoringConfig(level_thresholds=[(40.0, RiskLevel.HIGH), (80.0, RiskLevel.LOW)])

    def test_thresholds_within_range(self):
        with pytest.raises(ValidationError):
            RiskScoringConfig(level_thresholds=[(120.0, RiskLevel.LOW)])

    def test_fragments_normalized(self):
        config = RiskScoringConfig(jurisdiction_tiers={"  Estonia ": JurisdictionTier.MEDIUM})
        assert config.jurisdiction_tiers == {"estonia": JurisdictionTier.MEDIUM}

    def test_empty_fragment_rejected(self):
        with pytest.raises(ValidationError):
            RiskScoringConfig(jurisdiction_tiers={"  ": JurisdictionTier.LOW})

    def test_tier_scores_complete(self):
        with pytest.raises(ValidationError):
            RiskScoringConfig(tier_scores={JurisdictionTier.LOW: 30.0})

    def test_negative_tier_score_rejected(self):
        """A negative tier score fails at load time, not during assessment."""
        with pytest.raises(ValidationError) as exc_info:
            RiskScoringConfig(tier_scores={
                JurisdictionTier.LOW: 30.0,
                JurisdictionTier.MEDIUM: 20.0,
                JurisdictionTier.HIGH: -5.0,
            })
        assert "non-negative" in str(exc_info.value)

    def test_tier_scores_must_descend(self):
        with pytest.raises(ValidationError):
            RiskScoringConfig(tier_scores={
                JurisdictionTier.LOW: 10.0,
                JurisdictionTier.MEDIUM: 20.0,
                JurisdictionTier.HIGH: 30.0,
            })

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            RiskScoringConfig(weight={RiskCategory.KYC: 1.0})

    def test_tier_score_above_factor_max_capped(self, fixed_clock):
        """Tier scores above the factor maximum are capped when scoring."""
        config = RiskScoringConfig(tier_scores={
            JurisdictionTier.LOW: 40.0,
            JurisdictionTier.MEDIUM: 20.0,
            JurisdictionTier.HIGH: 0.0,
        })
        assessment = calculate_risk_score(
            EntityComplianceSnapshot(headquarters_location="Singapore"),
            config=config,
            clock=fixed_clock,
        )
        factor = assessment.category(RiskCategory.REGULATORY).factors[0]
        assert factor.score == 30
        assert factor.description == "Jurisdiction risk assessment: Low Risk"

        assessment = calculate_risk_score(
            EntityComplianceSnapshot(headquarters_location="Atlantis"),
            config=config,
            clock=fixed_clock,
        )
        factor = assessment.category(RiskCategory.REGULATORY).factors[0]
        assert factor.score == 0
        assert factor.description == "Jurisdiction risk assessment: High Risk"

    def test_custom_weights_change_overall(self, fixed_clock):
        """Weights are applied from the injected config."""
        snapshot = EntityComplianceSnapshot(holds_required_licenses=True, headquarters_location="Japan")
        weights = {category: 0.0 for category in RiskCategory}
        weights[RiskCategory.REGULATORY] = 1.0

        assessment = calculate_risk_score(
            snapshot, config=RiskScoringConfig(weights=weights), clock=fixed_clock
        )

        assert assessment.overall_score == pytest.approx(70.0)
        assert assessment.risk_level == RiskLevel.MEDIUM

    def test_custom_jurisdiction_table(self, fixed_clock):
        """A replaced jurisdiction table drives the regulatory factor."""
        config = RiskScoringConfig(jurisdiction_tiers={"estonia": JurisdictionTier.LOW})
        assessment = calculate_risk_score(
            EntityComplianceSnapshot(headquarters_location="Tallinn, Estonia"),
            config=config,
            clock=fixed_clock,
        )
        assert assessment.category(RiskCategory.REGULATORY).score == 30

        # Singapore is no longer listed
        assessment = calculate_risk_score(
            EntityComplianceSnapshot(headquarters_location="Singapore"),
            config=config,
            clock=fixed_clock,
        )
        assert assessment.category(RiskCategory.REGULATORY).score == 10


# =============================================================================
# YAML Loading Tests
# =============================================================================


class TestLoadScoringConfig:
    """Tests for loading policy files."""

    def test_load_partial_policy(self, tmp_path):
        """Keys left out of the file keep their defaults."""
        path = tmp_path / "policy.yaml"
        path.write_text(
            "missing_data_policy: exclude\n"
            "jurisdiction_tiers:\n"
            "  Estonia: medium\n"
            "  Singapore: low\n"
        )

        config = load_scoring_config(path)

        assert config.missing_data_policy == MissingDataPolicy.EXCLUDE
        assert config.jurisdiction_tiers["estonia"] == JurisdictionTier.MEDIUM
        assert config.weights == DEFAULT_SCORING_CONFIG.weights

    def test_load_weights_by_label(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text(
            "weights:\n"
            "  KYC/AML Controls: 0.30\n"
            "  Security Measures: 0.20\n"
            "  Custody Arrangements: 0.20\n"
            "  Trading Controls: 0.15\n"
            "  Regulatory Compliance: 0.15\n"
            "level_thresholds:\n"
            "  - [85, Low]\n"
            "  - [65, Medium]\n"
            "  - [45, High]\n"
        )

        config = load_scoring_config(path)

        assert config.weights[RiskCategory.KYC] == 0.30
        assert config.level_thresholds == [
            (85.0, RiskLevel.LOW),
            (65.0, RiskLevel.MEDIUM),
            (45.0, RiskLevel.HIGH),
        ]

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("")
        assert load_scoring_config(path) == DEFAULT_SCORING_CONFIG

    def test_missing_file(self, tmp_path):
        with pytest.raises(PolicyLoadError):
            load_scoring_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("weights: [unclosed\n")
        with pytest.raises(PolicyLoadError) as exc_info:
            load_scoring_config(path)
        assert "Invalid YAML" in str(exc_info.value)

    def test_non_mapping_policy(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(PolicyLoadError):
            load_scoring_config(path)

    def test_misspelled_policy_key(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("missing_data: exclude\n")
        with pytest.raises(PolicyLoadError):
            load_scoring_config(path)

    def test_invalid_policy_values(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("weights:\n  KYC/AML Controls: 1.0\n")
        with pytest.raises(PolicyLoadError) as exc_info:
            load_scoring_config(path)
        assert "Invalid scoring policy" in str(exc_info.value)

    def test_policy_load_error_is_value_error(self, tmp_path):
        with pytest.raises(ValueError):
            load_scoring_config(tmp_path / "nope.yaml")


# =============================================================================
# Jurisdiction Classification Tests
# =============================================================================


class TestJurisdictionClassification:
    """Tests for the jurisdiction lookup helper."""

    @pytest.mark.parametrize("location", [
        "UNITED STATES",
        "united states",
        "United States of America",
        "New York, United States",
    ])
    def test_case_insensitive_substring(self, location):
        assert classify_jurisdiction(location) == JurisdictionTier.LOW
        assert jurisdiction_score(location) == 30

    @pytest.mark.parametrize("location,tier", [
        ("Singapore", JurisdictionTier.LOW),
        ("Zug, Switzerland", JurisdictionTier.LOW),
        ("South Korea", JurisdictionTier.MEDIUM),
        ("Sao Paulo, Brazil", JurisdictionTier.MEDIUM),
        ("Seychelles", JurisdictionTier.HIGH),
        ("", JurisdictionTier.HIGH),
        ("   ", JurisdictionTier.HIGH),
    ])
    def test_default_table(self, location, tier):
        assert classify_jurisdiction(location) == tier

    def test_low_tier_checked_first(self):
        """A location matching both tiers resolves to the better tier."""
        table = {"ireland": JurisdictionTier.MEDIUM, "northern ireland": JurisdictionTier.LOW}
        assert classify_jurisdiction("Belfast, Northern Ireland", table) == JurisdictionTier.LOW

    def test_custom_tier_scores(self):
        scores = {JurisdictionTier.LOW: 25.0, JurisdictionTier.MEDIUM: 15.0, JurisdictionTier.HIGH: 0.0}
        assert jurisdiction_score("Japan", tier_scores=scores) == 25.0
        assert jurisdiction_score("Nowhere", tier_scores=scores) == 0.0

    @pytest.mark.parametrize("score,label", [
        (30, "Low Risk"),
        (20, "Medium Risk"),
        (10, "High Risk"),
    ])
    def test_risk_label(self, score, label):
        assert jurisdiction_risk_label(score) == label

    def test_risk_label_follows_tier_scores(self):
        scores = {JurisdictionTier.LOW: 25.0, JurisdictionTier.MEDIUM: 15.0, JurisdictionTier.HIGH: 0.0}
        assert jurisdiction_risk_label(25.0, scores) == "Low Risk"
        assert jurisdiction_risk_label(15.0, scores) == "Medium Risk"
        assert jurisdiction_risk_label(20.0, scores) == "Medium Risk"
        assert jurisdiction_risk_label(0.0, scores) == "High Risk"

    def test_default_table_is_lowercase(self):
        assert all(fragment == fragment.lower() for fragment in DEFAULT_JURISDICTION_TIERS)


def test_example_policy_matches_defaults():
    """The shipped example policy restates the built-in defaults."""
    path = Path(__file__).parent.parent / "risk_policy.example.yaml"
    assert load_scoring_config(path) == DEFAULT_SCORING_CONFIG
