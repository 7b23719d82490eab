import logging

import httpx
from fastapi import APIRouter

from ._config import LaunchConfig
from ._fhir import FhirClient, FhirResourceFetcher
from ._launch import LaunchManager
from ._orchestrator import LaunchOrchestrator
from ._storage import MemorySessionStore, SessionStore
from ._token import TokenExchanger

logger = logging.getLogger(__name__)


class SmartLaunchRouter(APIRouter):
    orchestrator: LaunchOrchestrator

    def __init__(
        self,
        config: LaunchConfig | None = None,
        store: SessionStore | None = None,
        token_exchanger: TokenExchanger | None = None,
        fhir_client: FhirResourceFetcher | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Routes served at the client's redirect URI.

        Args:
            config: Client registration, read from the environment when omitted.
            store: Session store shared by every request, in memory by default.
            token_exchanger: Replaces the default token endpoint client.
            fhir_client: Replaces the default FHIR reader.
            http_client: Shared HTTP client for the default token and FHIR clients.
        """
        super().__init__()

        self._config = config or LaunchConfig.from_env()

        self.launch_manager = LaunchManager()

        self.orchestrator = LaunchOrchestrator(
            config=self._config,
            store=store if store is not None else MemorySessionStore(),
            token_exchanger=token_exchanger
            or TokenExchanger(self._config, http_client),
            fhir_client=fhir_client or FhirClient(http_client),
        )

        logger.info(
            f"SMART launch client {self._config.client_id} "
            f"redirecting to {self._config.redirect_uri}"
        )

        for route in self.launch_manager.routes:
            self.add_api_route(
                route.path,
                route.to_fastapi_endpoint(self.orchestrator),
                methods=route.methods,
                operation_id=route.operation_id,
                summary=route.summary,
                include_in_schema=route.include_in_schema,
            )
