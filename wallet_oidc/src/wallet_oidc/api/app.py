"""FastAPI application for the wallet OIDC flows"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wallet_oidc.api.dependencies import get_container
from wallet_oidc.api.routes import issuance, presentation

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan context manager.

    Configures logging and loads the wallet configuration at startup.
    """
    logging.basicConfig(
        level=os.getenv("WALLET_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = get_container().get_config()
    LOGGER.info("Wallet OIDC API ready (client_id=%s)", config.client_id)

    yield

    LOGGER.info("Shutting down wallet OIDC API")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Wallet OIDC",
        description="""
        Wallet-side OpenID4CI issuance and OpenID4VP presentation flows

        ## Endpoints

        ### Issuance
        - `POST /issuance/authorize` - Start issuance (authorization code or pre-authorized)
        - `GET /issuance/callback` - Wallet redirect URI completing the authorization code flow

        ### Presentation
        - `POST /presentations/initiate` - Fetch and verify a verifier request, query the wallet
        - `POST /presentations/submit` - Sign and post ID and VP tokens

        ### Presentation Exchange
        - `POST /presentation-exchange/normalize` - Group a query result by input descriptor
        - `POST /presentation-exchange/reselect` - Keep the user's selected credentials
        """,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    allowed_origins = [o for o in os.getenv("WALLET_ALLOWED_ORIGINS", "").split(",") if o]
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(issuance.router)
    app.include_router(presentation.router)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return JSONResponse(content={"status": "healthy", "service": "wallet-oidc"})

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
