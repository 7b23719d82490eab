from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from smart_launch._config import LaunchConfig
from smart_launch._storage import MemorySessionStore
from smart_launch.app import create_app

from ..conftest import FakeFhirClient, FakeTokenExchanger


@pytest.fixture
def test_app(
    config: LaunchConfig,
    store: MemorySessionStore,
    token_exchanger: FakeTokenExchanger,
    fhir_client: FakeFhirClient,
) -> FastAPI:
    return create_app(
        config=config,
        store=store,
        token_exchanger=token_exchanger,  # type: ignore[arg-type]
        fhir_client=fhir_client,
    )


@pytest.fixture
def client(test_app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(test_app) as c:
        yield c
