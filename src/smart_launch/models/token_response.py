from pydantic import BaseModel, ConfigDict, Field, RootModel


class SmartTokenResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(description="The issued access token")
    patient: str = Field(description="The patient in context for this launch")
    token_type: str | None = Field(
        None, description="The type of token, usually 'Bearer'"
    )
    expires_in: int | None = Field(
        None, description="Lifetime of the access token in seconds"
    )
    scope: str | None = Field(
        None,
        description="Space-delimited list of scopes associated with the access token",
    )
    id_token: str | None = Field(
        None,
        description="OpenID Connect ID token returned alongside access token",
    )


class TokenErrorResponse(BaseModel):
    error: str = Field(description="Error code as per OAuth 2.0 specification")
    error_description: str | None = Field(
        None, description="Human-readable explanation of the error"
    )
    error_uri: str | None = Field(
        None, description="URI to a web page with more information about the error"
    )


class SmartTokenEndpointResponse(RootModel):
    root: SmartTokenResponse | TokenErrorResponse

    def is_error(self) -> bool:
        return isinstance(self.root, TokenErrorResponse)
