from typing import Any

from pydantic import BaseModel


class PatientSummary(BaseModel):
    id: str | None = None
    name: str | None = None
    gender: str | None = None
    birth_date: str | None = None
    active: bool = False
    address: str | None = None

    @classmethod
    def from_resource(cls, resource: dict[str, Any]) -> "PatientSummary":
        names = resource.get("name") or [{}]
        first_name = names[0]
        given = first_name.get("given") or []

        parts = [
            part
            for part in (given[0] if given else None, first_name.get("family"))
            if part
        ]

        addresses = resource.get("address") or [{}]

        return cls(
            id=resource.get("id"),
            name=" ".join(parts) or None,
            gender=resource.get("gender"),
            birth_date=resource.get("birthDate"),
            active=bool(resource.get("active")),
            address=addresses[0].get("text"),
        )


class ObservationSummary(BaseModel):
    code: str = "Unknown"
    value: float | int | str | None = None
    unit: str | None = None
    effective: str | None = None

    @classmethod
    def from_resource(cls, resource: dict[str, Any]) -> "ObservationSummary":
        code = resource.get("code") or {}
        quantity = resource.get("valueQuantity") or {}

        return cls(
            code=code.get("text") or "Unknown",
            value=quantity.get("value"),
            unit=quantity.get("unit"),
            effective=resource.get("effectiveDateTime"),
        )
