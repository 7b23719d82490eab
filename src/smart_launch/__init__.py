from smart_launch._config import LaunchConfig
from smart_launch._fhir import FhirClient, FhirResourceFetcher
from smart_launch._orchestrator import (
    LaunchOrchestrator,
    LaunchOutcome,
    LaunchPath,
    LaunchState,
)
from smart_launch._storage import MemorySessionStore, SessionStore
from smart_launch._token import TokenExchanger, TokenResult
from smart_launch.app import create_app
from smart_launch.router import SmartLaunchRouter

__all__ = [
    "FhirClient",
    "FhirResourceFetcher",
    "LaunchConfig",
    "LaunchOrchestrator",
    "LaunchOutcome",
    "LaunchPath",
    "LaunchState",
    "MemorySessionStore",
    "SessionStore",
    "SmartLaunchRouter",
    "TokenExchanger",
    "TokenResult",
    "create_app",
]
