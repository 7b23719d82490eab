import logging
from urllib.parse import urlparse

import httpx
from fastapi import FastAPI

from ._config import LaunchConfig
from ._fhir import FhirResourceFetcher
from ._storage import SessionStore
from ._token import TokenExchanger
from .router import SmartLaunchRouter


def create_app(
    config: LaunchConfig | None = None,
    store: SessionStore | None = None,
    token_exchanger: TokenExchanger | None = None,
    fhir_client: FhirResourceFetcher | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    app = FastAPI(title="SMART on FHIR launch", docs_url=None, redoc_url=None)

    router = SmartLaunchRouter(
        config=config,
        store=store,
        token_exchanger=token_exchanger,
        fhir_client=fhir_client,
        http_client=http_client,
    )

    app.include_router(router)

    return app


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO)

    config = LaunchConfig.from_env()
    redirect_uri = urlparse(config.redirect_uri)

    uvicorn.run(
        create_app(config),
        host=redirect_uri.hostname or "localhost",
        port=redirect_uri.port or 3000,
    )
