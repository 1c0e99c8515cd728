"""Pytest fixtures for test suite."""

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.risk_analysis.router import get_clock
from backend.risk_analysis import (
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

FIXED_NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def fixed_now() -> datetime:
    """Reference assessment time."""
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def client(fixed_clock):
    """Test client for the FastAPI app, assessing at FIXED_NOW."""
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def compliant_snapshot() -> EntityComplianceSnapshot:
    """Entity that earns full marks in every category."""
    return EntityComplianceSnapshot(
        entity_name="Harbor Exchange",
        kyc_verification_metrics=KycVerificationMetrics(
            verified_users=10_000,
            non_verified_users=0,
            high_risk_jurisdiction_percentage=0,
        ),
        sanctions_compliance=SanctionsCompliance(
            ofac_compliant=True,
            fatf_compliant=True,
            eu_compliant=True,
        ),
        wash_trading_detection=WashTradingDetection(
            automated_bot_detection=True,
            spoofing_detection=True,
        ),
        insurance_coverage=InsuranceCoverage(
            has_insurance=True,
            coverage_limit=250_000_000,
            last_penetration_test=date(2026, 3, 1),
        ),
        custody_arrangements=CustodyArrangements(
            cold_storage_percentage=98,
            hot_wallet_percentage=2,
            user_fund_segregation=True,
            multi_sig_required=True,
        ),
        hft_activity_metrics=HftActivityMetrics(hft_bots_allowed=False),
        leverage_and_margin=LeverageAndMargin(max_leverage=3),
        blockchain_analytics=BlockchainAnalytics(
            real_time_analytics=True,
            proof_of_reserves=True,
            monitoring_tools=["Chainalysis", "Elliptic", "TRM Labs"],
        ),
        holds_required_licenses=True,
        headquarters_location="Singapore",
    )


@pytest.fixture
def weak_snapshot() -> EntityComplianceSnapshot:
    """Entity failing nearly every control."""
    return EntityComplianceSnapshot(
        entity_name="Offshore Venue",
        kyc_verification_metrics=KycVerificationMetrics(
            verified_users=0,
            non_verified_users=5_000,
            high_risk_jurisdiction_percentage=100,
        ),
        sanctions_compliance=SanctionsCompliance(),
        wash_trading_detection=WashTradingDetection(),
        insurance_coverage=InsuranceCoverage(
            has_insurance=False,
            last_penetration_test=date(2024, 1, 1),
        ),
        custody_arrangements=CustodyArrangements(cold_storage_percentage=10),
        hft_activity_metrics=HftActivityMetrics(hft_bots_allowed=True, hft_volume_percentage=80),
        leverage_and_margin=LeverageAndMargin(max_leverage=100),
        blockchain_analytics=BlockchainAnalytics(),
        holds_required_licenses=False,
        headquarters_location="Atlantis",
    )


@pytest.fixture
def exchange_registration() -> dict:
    """Exchange registration record in the portal's stored format."""
    return {
        "exchangeName": "Northwind Digital",
        "legalEntityName": "Northwind Digital Assets Ltd",
        "registrationNumber": "NW-20931",
        "headquartersLocation": "United Kingdom",
        "websiteUrl": "https://northwind.example",
        "yearEstablished": "2019",
        "exchangeType": "CEX",
        "regulatoryLicenses": "FCA cryptoasset registration",
        "leverageAndMargin": {"maxLeverage": 10, "marginAccountsPercentage": 12},
        "hftActivityMetrics": {"hftBotsAllowed": True, "hftVolumePercentage": 45},
        "washTradingDetection": {
            "automatedBotDetection": True,
            "timeStampGranularity": "milliseconds",
            "spoofingDetection": False,
        },
        "securityMeasures": {"twoFactorAuth": True, "multiSigRequired": True},
        "kycVerificationMetrics": {
            "verifiedUsers": 900,
            "nonVerifiedUsers": 100,
            "highRiskJurisdictionPercentage": 5,
        },
        "sanctionsCompliance": {"ofacCompliant": True, "fatfCompliant": True, "euCompliant": False},
        "custodyArrangements": {
            "coldStoragePercentage": 90,
            "hotWalletPercentage": 10,
            "userFundSegregation": True,
        },
        "insuranceCoverage": {
            "hasInsurance": True,
            "coverageLimit": 50_000_000,
            "lastPenetrationTest": "2026-01-10T09:30:00.000Z",
        },
        "supportedBlockchains": ["Ethereum", "Bitcoin"],
        "blockchainAnalytics": {
            "realTimeAnalytics": True,
            "proofOfReserves": False,
            "monitoringTools": ["Chainalysis", "Elliptic"],
        },
    }
