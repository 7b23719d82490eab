import logging
from typing import Any

import httpx
from typing_extensions import Protocol

from .exceptions import ObservationFetchFailed, PatientFetchFailed

logger = logging.getLogger(__name__)


class FhirResourceFetcher(Protocol):
    async def get_patient(
        self, base_url: str, token: str, patient_id: str
    ) -> dict[str, Any]: ...

    async def get_observations(
        self,
        base_url: str,
        token: str,
        patient_id: str,
        sort: str = "-date",
        count: int = 5,
    ) -> list[dict[str, Any]]:
        """Return the Observation resources of the search Bundle."""
        ...


class FhirClient:
    """Reads FHIR R4 resources with a bearer token."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self.client = client

    async def _get(
        self, url: str, token: str, params: dict[str, Any] | None = None
    ) -> Any:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/fhir+json",
        }

        if self.client is not None:
            response = await self.client.get(url, headers=headers, params=params)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, headers=headers, params=params)

        response.raise_for_status()

        return response.json()

    async def get_patient(
        self, base_url: str, token: str, patient_id: str
    ) -> dict[str, Any]:
        url = f"{base_url.rstrip('/')}/Patient/{patient_id}"

        try:
            patient = await self._get(url, token)

            if not isinstance(patient, dict):
                raise ValueError(
                    f"Expected a Patient object, got {type(patient).__name__}"
                )

            return patient
        except Exception as e:
            logger.error(f"Failed to read Patient: {str(e)}")
            raise PatientFetchFailed() from e

    async def get_observations(
        self,
        base_url: str,
        token: str,
        patient_id: str,
        sort: str = "-date",
        count: int = 5,
    ) -> list[dict[str, Any]]:
        url = f"{base_url.rstrip('/')}/Observation"
        params = {"patient": patient_id, "_sort": sort, "_count": count}

        try:
            bundle = await self._get(url, token, params=params)

            resources = [
                entry["resource"]
                for entry in bundle.get("entry") or []
                if "resource" in entry
            ]

            if not all(isinstance(resource, dict) for resource in resources):
                raise ValueError("Bundle entry resource is not an object")

            return resources
        except Exception as e:
            logger.error(f"Failed to search Observations: {str(e)}")
            raise ObservationFetchFailed() from e
