from urllib.parse import urlencode

from pydantic import BaseModel, Field


class LaunchContext(BaseModel):
    """Launch parameters supplied by the EHR on the initial request."""

    iss: str = Field(description="The FHIR server base URL")
    launch: str = Field(description="Opaque launch token identifying the EHR context")


class PkceMaterial(BaseModel):
    # RFC 7636, section 4.1
    verifier: str = Field(
        min_length=43, max_length=128, pattern=r"^[A-Za-z0-9\-._~]+$"
    )
    challenge: str


class SessionState(BaseModel):
    issuer: str | None = None
    code_verifier: str | None = None
    access_token: str | None = None
    patient_id: str | None = None
    state: str | None = None

    @property
    def is_active(self) -> bool:
        # the token is only usable together with the issuer and patient it was
        # issued for
        return bool(self.access_token and self.patient_id and self.issuer)

    @property
    def can_exchange(self) -> bool:
        return bool(self.code_verifier and self.issuer)


class AuthorizationRequest(BaseModel):
    issuer: str
    launch: str
    code_challenge: str
    client_id: str
    redirect_uri: str
    scope: str
    state: str

    def to_query_params(self) -> dict[str, str]:
        return {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "state": self.state,
            "aud": self.issuer,
            "launch": self.launch,
            "code_challenge": self.code_challenge,
            "code_challenge_method": "S256",
        }

    def to_query_string(self) -> str:
        return urlencode(self.to_query_params())
