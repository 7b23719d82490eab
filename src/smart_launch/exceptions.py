class SmartLaunchException(Exception):
    error: str = "server_error"
    default_description: str | None = None
    status_code: int = 400

    def __init__(self, error_description: str | None = None) -> None:
        self.error_description = error_description or self.default_description

        super().__init__(self.error_description or self.error)


class InvalidIssuer(SmartLaunchException):
    error = "invalid_issuer"
    default_description = "Invalid issuer"


class MissingSessionData(SmartLaunchException):
    error = "missing_session_data"
    default_description = "Missing verification or issuer data."


class StateMismatch(SmartLaunchException):
    error = "state_mismatch"
    default_description = "Authorization response state does not match"


class TokenExchangeFailed(SmartLaunchException):
    error = "token_exchange_failed"
    default_description = "Token exchange failed"
    status_code = 502


class PatientFetchFailed(SmartLaunchException):
    error = "patient_fetch_failed"
    default_description = "FHIR Patient read failed"
    status_code = 502


class ObservationFetchFailed(SmartLaunchException):
    error = "observation_fetch_failed"
    default_description = "FHIR Observation search failed"
    status_code = 502
