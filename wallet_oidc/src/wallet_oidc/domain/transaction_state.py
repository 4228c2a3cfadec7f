"""Opaque encoding of issuance transaction state

The encoded form is base64url (no padding) of the compact JSON document, safe
for URLs, cookies and key/value storage. It is reversible and not encrypted.

When a secret is configured, an HMAC-SHA256 tag is appended after a '.' so
that tampered state is rejected before any flow step runs. Without a secret
the state carries no integrity protection and must be trusted only as far as
the storage that returned it.
"""

import base64
import hashlib
import hmac
from typing import Optional

from returns.result import Failure, Result, Success

from wallet_oidc.domain.issuance import MalformedStateError, TransactionState

_TAG_SEPARATOR = "."


def marshal_state(state: TransactionState, secret: Optional[bytes] = None) -> str:
    """
    Encode transaction state for the caller to persist across the redirect.

    Args:
        state: Transaction state snapshot
        secret: Optional key for the integrity tag

    Returns:
        Opaque URL-safe string
    """
    encoded = _b64encode(state.model_dump_json(by_alias=True).encode("utf-8"))
    if secret is None:
        return encoded
    return f"{encoded}{_TAG_SEPARATOR}{_b64encode(_tag(secret, encoded))}"


def unmarshal_state(
    encoded: str, secret: Optional[bytes] = None
) -> Result[TransactionState, MalformedStateError]:
    """
    Decode transaction state produced by marshal_state().

    Args:
        encoded: Opaque string returned to the caller by authorize()
        secret: Key the state was tagged with, if any

    Returns:
        Success(TransactionState) or Failure(MalformedStateError)
    """
    if not encoded:
        return Failure(MalformedStateError("client state is empty"))

    payload, _, tag = encoded.partition(_TAG_SEPARATOR)

    if secret is not None:
        if not tag:
            return Failure(MalformedStateError("client state is missing its integrity tag"))
        try:
            expected = _b64encode(_tag(secret, payload))
        except ValueError as e:
            return Failure(MalformedStateError(f"client state cannot be authenticated: {e}", cause=e))
        if not hmac.compare_digest(expected.encode("ascii"), tag.encode("utf-8", "surrogatepass")):
            return Failure(MalformedStateError("client state integrity tag does not match"))

    try:
        raw = _b64decode(payload)
        return Success(TransactionState.model_validate_json(raw))
    except ValueError as e:
        return Failure(MalformedStateError(f"client state is not a valid transaction state: {e}", cause=e))


def _tag(secret: bytes, payload: str) -> bytes:
    return hmac.new(secret, payload.encode("ascii"), hashlib.sha256).digest()


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padding = -len(data) % 4
    return base64.urlsafe_b64decode(data + "=" * padding)
