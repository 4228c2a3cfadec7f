"""End-to-end tests of the HTTP API against stubbed issuer, verifier and agent"""

import base64
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from fastapi.testclient import TestClient
from joserfc import jwt

from conftest import CLIENT_ID, ISSUER, USER_DID, WALLET_CALLBACK, IssuerStub
from wallet_oidc.adapter.output.jose.keys import generate_key, load_key
from wallet_oidc.api import dependencies
from wallet_oidc.api.app import create_app
from wallet_oidc.api.dependencies import DependencyContainer
from wallet_oidc.domain.transaction_state import unmarshal_state
from wallet_oidc.domain.wallet_config import WalletConfig

AGENT_URL = "https://agent.example.com"
VERIFIER = "https://verifier.example.com"
VERIFIER_DID = "did:example:verifier"
REQUEST_URI = f"{VERIFIER}/request/r-1"
RESPONSE_URI = f"{VERIFIER}/response"
STATE_SECRET = "integration-secret"

DEFINITION = {"id": "def-1", "input_descriptors": [{"id": "prc", "name": "Residence"}]}
PRC = {"id": "urn:uuid:prc-1", "type": ["VerifiableCredential", "PermanentResidentCard"]}
PRC_OTHER = {"id": "urn:uuid:prc-2", "type": ["VerifiableCredential", "PermanentResidentCard"]}
QUERY_RESULT = {
    "type": ["VerifiablePresentation"],
    "presentation_submission": {
        "id": "sub-1",
        "definition_id": "def-1",
        "descriptor_map": [
            {"id": "prc", "format": "ldp_vp", "path": "$.verifiableCredential[0]"},
            {"id": "prc", "format": "ldp_vp", "path": "$.verifiableCredential[1]"},
        ],
    },
    "verifiableCredential": [PRC, PRC_OTHER],
}


class Network:
    """Routes outbound requests to the issuer stub, the verifier and the agent"""

    def __init__(self, issuer: IssuerStub, request_object: str, did_document: dict):
        self.issuer = issuer
        self.request_object = request_object
        self.did_document = did_document
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url.startswith(ISSUER):
            return self.issuer(request)
        if url == REQUEST_URI:
            return httpx.Response(200, text=self.request_object)
        if url == RESPONSE_URI:
            return httpx.Response(200, text="presentation accepted")
        if url.startswith(f"{AGENT_URL}/vdr/did/resolve/"):
            return httpx.Response(200, json={"did": {"didDocument": self.did_document}})
        if url == f"{AGENT_URL}/vcwallet/query":
            return httpx.Response(200, json={"results": [QUERY_RESULT]})
        return httpx.Response(404)

    def posted_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST" and str(r.url) == url]


@pytest.fixture
def verifier_key():
    return generate_key("EC", "P-256")


@pytest.fixture
def network(issuer_stub, verifier_key) -> Network:
    request_object = jwt.encode(
        {"alg": "ES256", "kid": f"{VERIFIER_DID}#key-1"},
        {
            "client_id": "verifier-1",
            "nonce": "nonce-v",
            "redirect_uri": RESPONSE_URI,
            "claims": {"vp_token": {"presentation_definition": DEFINITION}},
        },
        verifier_key,
        algorithms=["ES256"],
    )
    did_document = {
        "id": VERIFIER_DID,
        "verificationMethod": [{"id": "#key-1", "publicKeyJwk": verifier_key.as_dict(private=False)}],
    }
    return Network(issuer_stub, request_object, did_document)


@pytest.fixture
def config(signing_jwk) -> WalletConfig:
    return WalletConfig(
        wallet_callback_uri=WALLET_CALLBACK,
        client_id=CLIENT_ID,
        user_did=USER_DID,
        signing_jwk=signing_jwk,
        signing_kid=f"{USER_DID}#key-1",
        agent_url=AGENT_URL,
        state_secret=STATE_SECRET,
    )


@pytest.fixture
def client(monkeypatch, config, network, fixed_clock):
    container = DependencyContainer(config=config, transport=httpx.MockTransport(network), clock=fixed_clock)
    monkeypatch.setattr(dependencies, "_container", container)
    with TestClient(create_app()) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "wallet-oidc"}


class TestIssuanceAPI:
    """Issuance endpoints"""

    def test_authorization_code_flow(self, client, network, config):
        """
        Authorization code issuance:
        1. /issuance/authorize pushes the request and sets the client_state cookie
        2. The issuer redirects to /issuance/callback with code and state
        3. The credential is returned and the cookie cleared
        """
        response = client.post(
            "/issuance/authorize",
            json={"issuance_request": {"issuer": ISSUER, "credentialType": "PermanentResidentCard"}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "redirect"
        redirect = urlsplit(body["redirect"])
        assert f"{redirect.scheme}://{redirect.netloc}{redirect.path}" == f"{ISSUER}/authorize"
        assert parse_qs(redirect.query) == {
            "request_uri": ["urn:ietf:params:oauth:request_uri:par-1"],
            "client_id": [CLIENT_ID],
        }
        assert client.cookies.get("client_state") == body["client_state"]

        oauth_state = unmarshal_state(body["client_state"], config.state_secret_bytes).unwrap().oauth_state
        callback = client.get("/issuance/callback", params={"code": "code-1", "state": oauth_state})

        assert callback.status_code == 200
        assert callback.json() == {
            "status": "issued",
            "format": "ldp_vc",
            "credential": {"id": "urn:uuid:vc-1", "type": ["VerifiableCredential"]},
        }
        assert "client_state" not in client.cookies

        token_form = parse_qs(network.issuer.form(network.issuer.requests_to("/token")[0]))
        assert token_form["code"] == ["code-1"]
        assert token_form["redirect_uri"] == [WALLET_CALLBACK]

    def test_callback_state_from_query(self, client, config):
        body = client.post(
            "/issuance/authorize",
            json={"issuance_request": {"issuer": ISSUER, "credential_type": "PermanentResidentCard"}},
        ).json()
        client.cookies.clear()

        oauth_state = unmarshal_state(body["client_state"], config.state_secret_bytes).unwrap().oauth_state
        response = client.get(
            "/issuance/callback",
            params={"code": "code-1", "state": oauth_state, "client_state": body["client_state"]},
        )

        assert response.status_code == 200

    def test_callback_state_mismatch(self, client):
        client.post(
            "/issuance/authorize",
            json={"issuance_request": {"issuer": ISSUER, "credential_type": "PermanentResidentCard"}},
        )

        response = client.get("/issuance/callback", params={"code": "code-1", "state": "forged"})

        assert response.status_code == 400
        assert response.json()["error"] == "state_mismatch"

    def test_callback_without_client_state(self, client):
        response = client.get("/issuance/callback", params={"code": "code-1", "state": "s"})

        assert response.status_code == 400
        assert response.json()["error"] == "missing_client_state"

    def test_pre_authorized_issuance(self, client):
        response = client.post(
            "/issuance/authorize",
            json={
                "issuance_request": {
                    "issuer": ISSUER,
                    "credential_type": "PermanentResidentCard",
                    "pre-authorized_code": "foo",
                    "user_pin_required": True,
                },
                "user_pin": "1234",
            },
        )

        assert response.status_code == 200
        assert response.json()["status"] == "issued"
        assert response.json()["format"] == "ldp_vc"

    def test_pre_authorized_without_pin(self, client, network):
        response = client.post(
            "/issuance/authorize",
            json={
                "issuance_request": {
                    "issuer": ISSUER,
                    "credential_type": "PermanentResidentCard",
                    "pre-authorized_code": "foo",
                    "user_pin_required": True,
                }
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "missing_pin"
        assert network.requests == []

    def test_invalid_issuance_request(self, client):
        response = client.post("/issuance/authorize", json={"issuance_request": {"issuer": ISSUER}})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    def test_issuer_unavailable(self, client, network):
        network.issuer.token_responses = [(500, {"error": "server_error"})]

        response = client.post(
            "/issuance/authorize",
            json={
                "issuance_request": {"issuer": ISSUER, "credential_type": "PRC", "pre-authorized_code": "foo"},
            },
        )

        assert response.status_code == 502
        assert response.json()["error"] == "issuer_communication"


class TestPresentationAPI:
    """Presentation endpoints"""

    def test_initiate_select_and_submit(self, client, network, signing_jwk):
        """
        Presentation:
        1. initiate verifies the request and returns grouped matches
        2. reselect keeps the chosen credential
        3. submit posts signed tokens to the verifier
        """
        initiated = client.post(
            "/presentations/initiate",
            json={"auth_token": "wallet-token", "url": f"openid-vc://?request_uri={REQUEST_URI}"},
        )

        assert initiated.status_code == 200
        body = initiated.json()
        assert body["context"] == {"client_id": "verifier-1", "nonce": "nonce-v", "redirect_uri": RESPONSE_URI}
        [[group]] = body["normalized"]
        assert group["id"] == "prc"
        assert group["credentials"] == [PRC, PRC_OTHER]

        resolved_did = network.requests[1].url.path.rsplit("/", 1)[-1]
        assert base64.urlsafe_b64decode(resolved_did + "==").decode() == VERIFIER_DID

        reselected = client.post(
            "/presentation-exchange/reselect",
            json={"presentation": body["results"][0], "selections": {"prc": "urn:uuid:prc-2"}},
        ).json()
        assert reselected["verifiableCredential"] == [PRC_OTHER]
        assert reselected["presentation_submission"]["descriptor_map"] == [
            {"id": "prc", "format": "ldp_vp", "path": "$.verifiableCredential[0]"}
        ]

        submitted = client.post(
            "/presentations/submit",
            json={
                "context": body["context"],
                "kid": f"{USER_DID}#key-1",
                "presentation": [reselected],
                "expiry": 1705323600,
            },
        )

        assert submitted.status_code == 200
        assert submitted.json() == {"redirect_uri": RESPONSE_URI, "status_code": 200, "body": "presentation accepted"}

        [post] = network.posted_to(RESPONSE_URI)
        form = parse_qs(post.content.decode("ascii"))
        vp_token = jwt.decode(form["vp_token"][0], load_key(signing_jwk), algorithms=["ES256"])
        assert vp_token.claims["vp"]["verifiableCredential"] == [PRC_OTHER]
        assert vp_token.claims["nonce"] == "nonce-v"

    def test_initiate_invalid_url(self, client):
        response = client.post("/presentations/initiate", json={"auth_token": "t", "url": "not-a-request"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request_url"

    def test_submit_invalid(self, client):
        response = client.post(
            "/presentations/submit",
            json={
                "context": {"client_id": "verifier-1", "nonce": "n", "redirect_uri": RESPONSE_URI},
                "kid": f"{USER_DID}#key-1",
                "presentation": [],
                "expiry": 1705323600,
            },
        )

        assert response.status_code == 400
        assert response.json() == {"error": "invalid_submission", "error_description": "presentation is missing"}


class TestPresentationExchangeAPI:
    """Normalize and reselect endpoints"""

    def test_normalize(self, client):
        response = client.post(
            "/presentation-exchange/normalize",
            json={
                "query": [{"type": "PresentationExchange", "credentialQuery": [DEFINITION]}],
                "presentation": QUERY_RESULT,
            },
        )

        assert response.status_code == 200
        [group] = response.json()
        assert group["name"] == "Residence"
        assert len(group["credentials"]) == 2

    def test_normalize_unknown_definition(self, client):
        response = client.post(
            "/presentation-exchange/normalize",
            json={"query": [{"type": "PresentationExchange", "credentialQuery": []}], "presentation": QUERY_RESULT},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "definition_not_found"

    def test_reselect_without_submission(self, client):
        presentation = {"type": ["VerifiablePresentation"], "verifiableCredential": [PRC]}

        response = client.post("/presentation-exchange/reselect", json={"presentation": presentation})

        assert response.json() == presentation
