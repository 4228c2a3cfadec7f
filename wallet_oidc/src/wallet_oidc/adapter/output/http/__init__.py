"""HTTP adapters (httpx)"""

from wallet_oidc.adapter.output.http.httpx_client import HttpxClient

__all__ = ["HttpxClient"]
