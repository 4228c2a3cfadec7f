"""
Basic usage example for the wallet OIDC flows

This script demonstrates, without any network access:
1. Creating a wallet configuration
2. Marshalling and unmarshalling issuance transaction state
3. Normalizing a Presentation Exchange query result
4. Reselecting one credential per input descriptor
5. Signing the ID and VP tokens of a submission
"""

import json

from returns.result import Failure

from wallet_oidc.adapter import JwkTokenSigner
from wallet_oidc.config import create_test_config
from wallet_oidc.domain.issuance import IssuerMetadata, TransactionState
from wallet_oidc.domain.presentation import (
    PresentationContext,
    build_id_token_payload,
    build_token_header,
    build_vp_token_payload,
)
from wallet_oidc.domain.presentation_exchange import normalize, reselect
from wallet_oidc.domain.transaction_state import marshal_state, unmarshal_state
from wallet_oidc.domain.value_objects import OAuthState

QUERY = [
    {
        "type": "PresentationExchange",
        "credentialQuery": [
            {
                "id": "employment-check",
                "input_descriptors": [
                    {"id": "degree", "name": "University degree", "purpose": "Verify education"},
                    {"id": "residence", "name": "Permanent resident card", "purpose": "Verify residence"},
                ],
            }
        ],
    }
]

PRESENTATION = {
    "@context": ["https://www.w3.org/2018/credentials/v1"],
    "type": ["VerifiablePresentation"],
    "presentation_submission": {
        "id": "submission-1",
        "definition_id": "employment-check",
        "descriptor_map": [
            {"id": "degree", "format": "ldp_vc", "path": "$.verifiableCredential[0]"},
            {"id": "degree", "format": "ldp_vc", "path": "$.verifiableCredential[1]"},
            {"id": "residence", "format": "ldp_vc", "path": "$.verifiableCredential[2]"},
        ],
    },
    "verifiableCredential": [
        {"id": "urn:uuid:bachelor", "type": ["VerifiableCredential", "UniversityDegreeCredential"]},
        {"id": "urn:uuid:master", "type": ["VerifiableCredential", "UniversityDegreeCredential"]},
        {"id": "urn:uuid:prc", "type": ["VerifiableCredential", "PermanentResidentCard"]},
    ],
}


def main():
    """Run the example"""

    print("=" * 60)
    print("Wallet OIDC - Basic Usage Example")
    print("=" * 60)

    # 1. Configuration
    print("\n1. Creating test configuration...")
    config = create_test_config()
    print(f"   ✓ Client ID: {config.client_id}")
    print(f"   ✓ Holder DID: {config.user_did}")

    # 2. Transaction state
    print("\n2. Marshalling transaction state...")
    state = TransactionState(
        credential_type="UniversityDegreeCredential",
        client_id=config.client_id,
        issuer_metadata=IssuerMetadata(
            issuer="https://issuer.example.com",
            token_endpoint="https://issuer.example.com/token",
            credential_endpoint="https://issuer.example.com/credential",
        ),
        oauth_state=str(OAuthState.generate()),
    )
    encoded = marshal_state(state, config.state_secret_bytes)
    print(f"   ✓ Client state: {encoded[:48]}...")
    decoded = unmarshal_state(encoded, config.state_secret_bytes)
    print(f"   ✓ Round trip intact: {decoded.unwrap() == state}")

    # 3. Normalize
    print("\n3. Normalizing query result...")
    groups = normalize(QUERY, PRESENTATION)
    if isinstance(groups, Failure):
        print(f"   ✗ Failed: {groups.failure()}")
        return
    for group in groups.unwrap():
        print(f"   ✓ {group.name}: {len(group.credentials)} candidate(s)")

    # 4. Reselect
    print("\n4. Selecting one credential per descriptor...")
    selected = reselect(PRESENTATION, {"degree": "urn:uuid:master", "residence": "urn:uuid:prc"}).unwrap()
    print(json.dumps(selected["presentation_submission"]["descriptor_map"], indent=2))

    # 5. Sign tokens
    print("\n5. Signing response tokens...")
    context = PresentationContext(client_id="verifier", nonce="n-0S6_WzA2Mj", redirect_uri="https://verifier.example.com/cb")
    signer = JwkTokenSigner(config.signing_jwk)
    header = build_token_header(config.signing_algorithm, config.key_id)
    expiry = 4102444800
    id_token = signer.sign(header, build_id_token_payload(config.user_did, context, selected, expiry)).unwrap()
    vp_token = signer.sign(header, build_vp_token_payload(config.user_did, context, selected, expiry)).unwrap()
    print(f"   ✓ id_token: {id_token[:40]}...")
    print(f"   ✓ vp_token: {vp_token[:40]}...")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
