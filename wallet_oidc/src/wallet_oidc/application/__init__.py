"""Application layer - Use case implementations

This layer contains the flow logic that orchestrates domain objects and
talks to issuers, verifiers and the wallet through ports.
"""

from wallet_oidc.application.deferred_issuance import DeferredIssuanceTask
from wallet_oidc.application.issuance_impl import OpenID4CIImpl
from wallet_oidc.application.presentation_impl import OpenID4VPImpl

__all__ = [
    "OpenID4CIImpl",
    "OpenID4VPImpl",
    "DeferredIssuanceTask",
]
