"""Configuration loader for the wallet"""

import json
import logging
import os
import secrets
from pathlib import Path

from wallet_oidc.adapter.output.jose.keys import generate_key
from wallet_oidc.domain.wallet_config import WalletConfig

LOGGER = logging.getLogger(__name__)

TEST_USER_DID = "did:example:wallet-holder"


def load_config_from_env() -> WalletConfig | None:
    """
    Load wallet configuration from environment variables.

    Environment variables:
    - WALLET_CALLBACK_URI: Wallet OIDC redirect URI
    - WALLET_CLIENT_ID: Wallet OAuth client ID
    - WALLET_USER_DID: Holder DID
    - WALLET_SIGNING_KEY: Path to JWK file for signing
    - WALLET_SIGNING_ALGORITHM: JWS algorithm (default: ES256)
    - WALLET_SIGNING_KID: Key ID for signed headers (default: holder DID)
    - WALLET_AGENT_URL: Wallet agent REST base URL
    - WALLET_STATE_SECRET: Transaction state HMAC secret
    - WALLET_HTTP_TIMEOUT: HTTP timeout in seconds (default: 30)

    Returns:
        WalletConfig if environment is properly configured, None otherwise
    """
    callback_uri = os.getenv("WALLET_CALLBACK_URI")
    client_id = os.getenv("WALLET_CLIENT_ID")
    user_did = os.getenv("WALLET_USER_DID")
    signing_key_path = os.getenv("WALLET_SIGNING_KEY")

    if not all([callback_uri, client_id, user_did, signing_key_path]):
        return None

    signing_key_file = Path(signing_key_path)
    if not signing_key_file.exists():
        raise FileNotFoundError(f"Signing key not found: {signing_key_path}")

    with open(signing_key_file, "r") as f:
        signing_key = json.load(f)

    return WalletConfig(
        wallet_callback_uri=callback_uri,
        client_id=client_id,
        user_did=user_did,
        signing_algorithm=os.getenv("WALLET_SIGNING_ALGORITHM", "ES256"),
        signing_jwk=signing_key,
        signing_kid=os.getenv("WALLET_SIGNING_KID"),
        agent_url=os.getenv("WALLET_AGENT_URL"),
        state_secret=os.getenv("WALLET_STATE_SECRET"),
        http_timeout_seconds=float(os.getenv("WALLET_HTTP_TIMEOUT", "30")),
    )


def create_test_config() -> WalletConfig:
    """
    Create a test configuration with an ephemeral P-256 key.

    Returns:
        WalletConfig with test settings
    """
    test_jwk = generate_key("EC", "P-256").as_dict(private=True)

    return WalletConfig(
        wallet_callback_uri="http://localhost:8000/issuance/callback",
        client_id="test-wallet",
        user_did=TEST_USER_DID,
        signing_algorithm="ES256",
        signing_jwk=test_jwk,
        signing_kid=f"{TEST_USER_DID}#key-1",
        agent_url="http://localhost:8082",
        state_secret=secrets.token_urlsafe(32),
        deferred_poll_interval_seconds=1.0,
    )


def load_or_create_config() -> WalletConfig:
    """
    Load configuration from environment or create test config.

    Returns:
        WalletConfig
    """
    config = load_config_from_env()
    if config is None:
        LOGGER.warning("No environment configuration found, using test config")
        config = create_test_config()
    else:
        LOGGER.info("Loaded configuration from environment")

    return config
