"""Wallet agent REST adapters"""

from wallet_oidc.adapter.output.agent.agent_rest_client import (
    AgentRestCredentialQuery,
    AgentRestDIDResolver,
)

__all__ = ["AgentRestDIDResolver", "AgentRestCredentialQuery"]
