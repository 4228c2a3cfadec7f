"""
Run the wallet OIDC API server

This script starts the FastAPI server exposing the issuance and presentation flows.
"""

import uvicorn

from wallet_oidc.api.app import app

if __name__ == "__main__":
    print("=" * 60)
    print("Starting Wallet OIDC API Server")
    print("=" * 60)
    print("\nEndpoints:")
    print("  - Docs: http://localhost:8000/docs")
    print("  - Health: http://localhost:8000/health")
    print("\nIssuance endpoints:")
    print("  - POST /issuance/authorize")
    print("  - GET /issuance/callback")
    print("\nPresentation endpoints:")
    print("  - POST /presentations/initiate")
    print("  - POST /presentations/submit")
    print("  - POST /presentation-exchange/normalize")
    print("  - POST /presentation-exchange/reselect")
    print("\n" + "=" * 60)

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info",
        access_log=True,
    )
