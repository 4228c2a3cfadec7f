"""Wallet-side OpenID4CI issuance and OpenID4VP presentation flows"""

__version__ = "0.1.0"
