"""Launch state machine for the SMART-on-FHIR EHR launch.

Each page load is evaluated once against its query string and the session
store:

- ``?code=...`` exchanges the authorization code (takes priority)
- ``?iss=...&launch=...`` starts a fresh launch and redirects to the EHR
- anything else resumes a stored session, if there is one

The redirect to the authorization server and back is not a suspended call,
whatever has to survive it lives in the session store.
"""

import asyncio
import logging
import secrets
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, Field

from ._authorize import build_authorization_url, generate_state
from ._config import LaunchConfig
from ._fhir import FhirResourceFetcher
from ._storage import (
    ACCESS_TOKEN_KEY,
    CODE_VERIFIER_KEY,
    ISSUER_KEY,
    PATIENT_KEY,
    STATE_KEY,
    SessionStore,
    read_session_state,
)
from ._token import TokenExchanger
from .exceptions import (
    MissingSessionData,
    SmartLaunchException,
    StateMismatch,
)
from .models.fhir import ObservationSummary, PatientSummary
from .models.launch import LaunchContext
from .utils._pkce import generate_pkce

logger = logging.getLogger(__name__)

OBSERVATION_SORT = "-date"
OBSERVATION_COUNT = 5


class LaunchPath(str, Enum):
    FRESH_LAUNCH = "fresh_launch"
    CALLBACK_EXCHANGE = "callback_exchange"
    RESUME = "resume"


class LaunchState(str, Enum):
    REDIRECT = "redirect"
    ACTIVE = "active"
    NO_SESSION = "no_session"
    ERROR = "error"


class LaunchOutcome(BaseModel):
    path: LaunchPath
    state: LaunchState

    # Where the browser has to go next (fresh launch only)
    redirect_url: str | None = None
    # Address to show in place of the callback URL, without reloading
    replace_url: str | None = None

    patient: PatientSummary | None = None
    observations: list[ObservationSummary] = Field(default_factory=list)

    error: str | None = None
    error_code: str | None = None
    # HTTP status for the page, not part of the JSON view
    status_code: int = Field(default=200, exclude=True)

    @classmethod
    def from_exception(
        cls, path: LaunchPath, exception: SmartLaunchException
    ) -> "LaunchOutcome":
        return cls(
            path=path,
            state=LaunchState.ERROR,
            error=exception.error_description,
            error_code=exception.error,
            status_code=exception.status_code,
        )


def select_launch_path(query_params: Mapping[str, str]) -> LaunchPath:
    # a code means the authorization redirect already happened
    if query_params.get("code"):
        return LaunchPath.CALLBACK_EXCHANGE

    if query_params.get("iss") and query_params.get("launch"):
        return LaunchPath.FRESH_LAUNCH

    return LaunchPath.RESUME


class LaunchOrchestrator:
    def __init__(
        self,
        config: LaunchConfig,
        store: SessionStore,
        token_exchanger: TokenExchanger,
        fhir_client: FhirResourceFetcher,
    ):
        self.config = config
        self.store = store
        self.token_exchanger = token_exchanger
        self.fhir_client = fhir_client

    async def evaluate(self, query_params: Mapping[str, str]) -> LaunchOutcome:
        """Decide which launch path applies and run it.

        Launch errors never escape, they are turned into an ``ERROR`` outcome carrying
        a user facing message.
        """
        path = select_launch_path(query_params)

        logger.info(f"Evaluating launch path: {path.value}")

        try:
            if path is LaunchPath.CALLBACK_EXCHANGE:
                return await self._exchange_code(query_params)

            if path is LaunchPath.FRESH_LAUNCH:
                launch_context = LaunchContext(
                    iss=query_params["iss"], launch=query_params["launch"]
                )

                return self._start_launch(launch_context)

            return await self._resume()
        except SmartLaunchException as e:
            logger.error(f"Launch failed ({e.error}): {e.error_description}")

            return LaunchOutcome.from_exception(path, e)

    def logout(self) -> None:
        self.store.clear()

        logger.info("Session cleared")

    def _start_launch(self, launch_context: LaunchContext) -> LaunchOutcome:
        pkce = generate_pkce()
        state = generate_state()

        # built before persisting anything so an invalid issuer leaves the store alone
        authorization_url = build_authorization_url(
            launch_context.iss,
            launch_context.launch,
            pkce.challenge,
            self.config,
            state=state,
        )

        self.store.set(CODE_VERIFIER_KEY, pkce.verifier)
        self.store.set(ISSUER_KEY, launch_context.iss)

        if self.config.verify_state:
            self.store.set(STATE_KEY, state)

        return LaunchOutcome(
            path=LaunchPath.FRESH_LAUNCH,
            state=LaunchState.REDIRECT,
            redirect_url=authorization_url,
        )

    async def _exchange_code(self, query_params: Mapping[str, str]) -> LaunchOutcome:
        session = read_session_state(self.store)

        if not session.can_exchange:
            raise MissingSessionData()

        assert session.code_verifier and session.issuer

        if self.config.verify_state:
            received_state = query_params.get("state")

            if (
                not received_state
                or not session.state
                or not secrets.compare_digest(received_state, session.state)
            ):
                raise StateMismatch()

        token = await self.token_exchanger.exchange(
            query_params["code"], session.code_verifier, session.issuer
        )

        self.store.set(ACCESS_TOKEN_KEY, token.access_token)
        self.store.set(PATIENT_KEY, token.patient_id)
        self.store.set(ISSUER_KEY, session.issuer)

        outcome = await self._load_records(
            LaunchPath.CALLBACK_EXCHANGE,
            session.issuer,
            token.access_token,
            token.patient_id,
        )
        outcome.replace_url = self.config.redirect_uri

        return outcome

    async def _resume(self) -> LaunchOutcome:
        session = read_session_state(self.store)

        if not session.is_active:
            return LaunchOutcome(path=LaunchPath.RESUME, state=LaunchState.NO_SESSION)

        assert session.issuer and session.access_token and session.patient_id

        return await self._load_records(
            LaunchPath.RESUME,
            session.issuer,
            session.access_token,
            session.patient_id,
        )

    async def _load_records(
        self, path: LaunchPath, issuer: str, access_token: str, patient_id: str
    ) -> LaunchOutcome:
        patient_result, observations_result = await asyncio.gather(
            self.fhir_client.get_patient(issuer, access_token, patient_id),
            self.fhir_client.get_observations(
                issuer,
                access_token,
                patient_id,
                sort=OBSERVATION_SORT,
                count=OBSERVATION_COUNT,
            ),
            return_exceptions=True,
        )

        for result in (patient_result, observations_result):
            if isinstance(result, BaseException) and not isinstance(
                result, SmartLaunchException
            ):
                raise result

        # a logout while the reads were in flight wins over their results
        if self.store.get(ACCESS_TOKEN_KEY) != access_token:
            logger.info("Session changed while fetching records, discarding results")

            return LaunchOutcome(path=path, state=LaunchState.NO_SESSION)

        observations: list[ObservationSummary] = []

        if isinstance(observations_result, SmartLaunchException):
            logger.warning("Observation fetch failed, showing patient only")
        elif isinstance(observations_result, list):
            observations = [
                ObservationSummary.from_resource(resource)
                for resource in observations_result
            ]

        if isinstance(patient_result, SmartLaunchException):
            outcome = LaunchOutcome.from_exception(path, patient_result)
            outcome.observations = observations

            return outcome

        assert isinstance(patient_result, dict)

        return LaunchOutcome(
            path=path,
            state=LaunchState.ACTIVE,
            patient=PatientSummary.from_resource(patient_result),
            observations=observations,
        )
