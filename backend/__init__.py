"""Crypto Compliance Risk Engine - Risk scoring for crypto-industry entities.

Scores exchanges, stablecoin issuers, DeFi protocols, NFT marketplaces and
funds on KYC/AML, security, custody, trading and regulatory controls.

Environment Variables:
    LOG_LEVEL: Logging level for the API (default "INFO").
    RISK_POLICY_FILE: Optional YAML scoring policy overriding the built-in
                      weights, thresholds and jurisdiction table.
    CORS_ORIGINS: Comma-separated allowed origins (default "*").
"""

__version__ = "0.1.0"
