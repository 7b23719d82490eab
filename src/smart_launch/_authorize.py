import secrets

from ._config import LaunchConfig
from .models.launch import AuthorizationRequest
from .utils._url import get_tenant_id


def generate_state() -> str:
    return secrets.token_urlsafe(16)


def get_authorization_endpoint(issuer: str, config: LaunchConfig) -> str:
    tenant_id = get_tenant_id(issuer)

    return (
        f"{config.authorization_base_url}/tenants/{tenant_id}"
        "/protocols/oauth2/profiles/smart-v1/personas/provider/authorize"
    )


def build_authorization_request(
    issuer: str,
    launch: str,
    code_challenge: str,
    config: LaunchConfig,
    state: str | None = None,
) -> AuthorizationRequest:
    return AuthorizationRequest(
        issuer=issuer,
        launch=launch,
        code_challenge=code_challenge,
        client_id=config.client_id,
        redirect_uri=config.redirect_uri,
        scope=config.scope,
        state=state or generate_state(),
    )


def build_authorization_url(
    issuer: str,
    launch: str,
    code_challenge: str,
    config: LaunchConfig,
    state: str | None = None,
) -> str:
    """
    Build the URL the browser is sent to for the EHR launch authorization.

    Raises:
        InvalidIssuer: If no tenant can be derived from the issuer
    """
    endpoint = get_authorization_endpoint(issuer, config)

    request = build_authorization_request(
        issuer, launch, code_challenge, config, state=state
    )

    return f"{endpoint}?{request.to_query_string()}"
