"""Input ports - Use case interfaces"""

from wallet_oidc.port.input.issue_credential import (
    AuthorizeOutcome,
    DeferredIssuance,
    IssueCredential,
)
from wallet_oidc.port.input.present_credential import PresentCredential

__all__ = [
    # Issue Credential
    "IssueCredential",
    "DeferredIssuance",
    "AuthorizeOutcome",
    # Present Credential
    "PresentCredential",
]
