from collections.abc import Callable
from typing import Any

import pytest

from smart_launch._config import LaunchConfig
from smart_launch._orchestrator import LaunchOrchestrator
from smart_launch._storage import MemorySessionStore
from smart_launch._token import TokenResult
from smart_launch.exceptions import SmartLaunchException

ISSUER = "https://fhir-ehr-code.cerner.com/r4/ec2458f2-1e24-41c8-b71b-0e701af7583d"
TENANT_ID = "ec2458f2-1e24-41c8-b71b-0e701af7583d"

PATIENT_RESOURCE = {
    "resourceType": "Patient",
    "id": "12724066",
    "active": True,
    "name": [{"use": "official", "family": "Smart", "given": ["Nancy", "Ann"]}],
    "gender": "female",
    "birthDate": "1980-08-11",
    "address": [{"text": "1234 Main St, Kansas City, MO 64105"}],
}

OBSERVATION_RESOURCE = {
    "resourceType": "Observation",
    "id": "obs-1",
    "status": "final",
    "code": {"text": "Heart Rate"},
    "valueQuantity": {"value": 72, "unit": "/min"},
    "effectiveDateTime": "2024-03-01T10:00:00Z",
}


class FakeTokenExchanger:
    """Records every exchange, returns a fixed result or raises."""

    def __init__(
        self,
        result: TokenResult | None = None,
        error: SmartLaunchException | None = None,
    ):
        self.result = result or TokenResult(
            access_token="test_access_token", patient_id="12724066"
        )
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def exchange(self, code: str, code_verifier: str, issuer: str) -> TokenResult:
        self.calls.append((code, code_verifier, issuer))

        if self.error:
            raise self.error

        return self.result


class FakeFhirClient:
    def __init__(self) -> None:
        self.patient: dict[str, Any] = PATIENT_RESOURCE
        self.observations: list[dict[str, Any]] = [OBSERVATION_RESOURCE]
        self.patient_error: SmartLaunchException | None = None
        self.observations_error: SmartLaunchException | None = None
        # runs while a read is "in flight"
        self.on_fetch: Callable[[], None] | None = None
        self.calls: list[tuple[str, str, str, str]] = []

    async def get_patient(
        self, base_url: str, token: str, patient_id: str
    ) -> dict[str, Any]:
        self.calls.append(("Patient", base_url, token, patient_id))

        if self.on_fetch:
            self.on_fetch()

        if self.patient_error:
            raise self.patient_error

        return self.patient

    async def get_observations(
        self,
        base_url: str,
        token: str,
        patient_id: str,
        sort: str = "-date",
        count: int = 5,
    ) -> list[dict[str, Any]]:
        self.calls.append(("Observation", base_url, token, patient_id))

        if self.observations_error:
            raise self.observations_error

        return self.observations


@pytest.fixture
def config() -> LaunchConfig:
    return LaunchConfig(
        client_id="test_client_id",
        redirect_uri="http://localhost:3000",
        scope="launch openid patient/*.read",
        default_launch_url=f"http://localhost:3000/?iss={ISSUER}&launch=test_launch",
    )


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def active_store(store: MemorySessionStore) -> MemorySessionStore:
    store.set("iss", ISSUER)
    store.set("access_token", "test_access_token")
    store.set("patient", "12724066")
    return store


@pytest.fixture
def token_exchanger() -> FakeTokenExchanger:
    return FakeTokenExchanger()


@pytest.fixture
def fhir_client() -> FakeFhirClient:
    return FakeFhirClient()


@pytest.fixture
def orchestrator(
    config: LaunchConfig,
    store: MemorySessionStore,
    token_exchanger: FakeTokenExchanger,
    fhir_client: FakeFhirClient,
) -> LaunchOrchestrator:
    return LaunchOrchestrator(
        config=config,
        store=store,
        token_exchanger=token_exchanger,  # type: ignore[arg-type]
        fhir_client=fhir_client,
    )
