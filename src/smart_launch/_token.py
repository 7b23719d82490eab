import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from ._config import LaunchConfig
from .exceptions import TokenExchangeFailed
from .models.token_response import (
    SmartTokenEndpointResponse,
    SmartTokenResponse,
    TokenErrorResponse,
)
from .utils._url import get_ehr_host, get_tenant_id

logger = logging.getLogger(__name__)


@dataclass
class TokenResult:
    access_token: str
    patient_id: str


class TokenExchanger:
    def __init__(
        self, config: LaunchConfig, client: httpx.AsyncClient | None = None
    ) -> None:
        """
        Args:
            config: Client registration used for the token request.
            client: Optional shared HTTP client. A short-lived client is
                created per exchange when omitted.
        """
        self.config = config
        self.client = client

    def get_token_endpoint(self, issuer: str) -> str:
        tenant_id = get_tenant_id(issuer)
        ehr_host = get_ehr_host(issuer)

        return (
            f"{self.config.authorization_base_url}/tenants/{tenant_id}"
            f"/hosts/{ehr_host}/protocols/oauth2/profiles/smart-v1/token"
        )

    def build_token_exchange_params(
        self, code: str, code_verifier: str
    ) -> dict[str, str]:
        return {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.config.redirect_uri,
            "client_id": self.config.client_id,
            "code_verifier": code_verifier,
        }

    async def send_token_request(
        self, token_endpoint: str, data: dict[str, Any]
    ) -> httpx.Response:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }

        if self.client is not None:
            return await self.client.post(token_endpoint, headers=headers, data=data)

        async with httpx.AsyncClient() as client:
            return await client.post(token_endpoint, headers=headers, data=data)

    async def exchange(self, code: str, code_verifier: str, issuer: str) -> TokenResult:
        """Exchange an authorization code for an access token and patient id.

        The code is single use, so a failed exchange is never retried.

        Raises:
            TokenExchangeFailed: If the request fails or the response can't be used
        """
        token_endpoint = self.get_token_endpoint(issuer)
        params = self.build_token_exchange_params(code, code_verifier)

        try:
            response = await self.send_token_request(token_endpoint, params)
            response.raise_for_status()

            token_response = SmartTokenEndpointResponse.model_validate_json(
                response.text
            )
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"HTTP error during token exchange: {e.response.status_code} - {e.response.text}"
            )
            raise TokenExchangeFailed() from e
        except httpx.RequestError as e:
            logger.error(f"Failed to exchange code for token: {str(e)}")
            raise TokenExchangeFailed() from e
        except ValidationError as e:
            logger.error(f"Failed to parse token response: {str(e)}")
            raise TokenExchangeFailed() from e

        if token_response.is_error():
            assert isinstance(token_response.root, TokenErrorResponse)

            logger.error(f"Token exchange failed: {token_response.root.error}")

            raise TokenExchangeFailed(
                f"Token exchange failed: {token_response.root.error}"
            )

        assert isinstance(token_response.root, SmartTokenResponse)

        return TokenResult(
            access_token=token_response.root.access_token,
            patient_id=token_response.root.patient,
        )
