from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_CLIENT_ID = "74ac1a3a-4927-4fa7-8c06-b5cba15473c0"
DEFAULT_REDIRECT_URI = "http://localhost:3000"
DEFAULT_SCOPE = (
    "launch openid fhirUser patient/*.read "
    "user/Observation.read user/Observation.write user/Patient.read"
)
DEFAULT_AUTHORIZATION_BASE_URL = "https://authorization.cerner.com"
DEFAULT_LAUNCH_URL = (
    "http://localhost:3000/"
    "?iss=https://fhir-ehr-code.cerner.com/r4/ec2458f2-1e24-41c8-b71b-0e701af7583d"
    "&launch=59792dc4-fc9c-4046-ada6-b9e63240b979"
)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)

    if value is None:
        return default

    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LaunchConfig:
    """Client registration and authorization server settings."""

    client_id: str = DEFAULT_CLIENT_ID
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scope: str = DEFAULT_SCOPE

    # Authorization and token endpoints are built under this base
    authorization_base_url: str = DEFAULT_AUTHORIZATION_BASE_URL

    # Linked from the "no active session" page, None hides the link
    default_launch_url: str | None = DEFAULT_LAUNCH_URL

    # Check the callback's state against the one sent with the authorization request?
    verify_state: bool = False

    def __post_init__(self) -> None:
        self.authorization_base_url = self.authorization_base_url.rstrip("/")

    @classmethod
    def from_env(cls) -> LaunchConfig:
        return cls(
            client_id=os.getenv("SMART_CLIENT_ID", DEFAULT_CLIENT_ID),
            redirect_uri=os.getenv("SMART_REDIRECT_URI", DEFAULT_REDIRECT_URI),
            scope=os.getenv("SMART_SCOPE", DEFAULT_SCOPE),
            authorization_base_url=os.getenv(
                "SMART_AUTHORIZATION_BASE_URL", DEFAULT_AUTHORIZATION_BASE_URL
            ),
            default_launch_url=os.getenv("SMART_DEFAULT_LAUNCH_URL", DEFAULT_LAUNCH_URL)
            or None,
            verify_state=_env_flag("SMART_VERIFY_STATE", False),
        )
