from typing import Self

from cross_web import Response as DuckResponse
from pydantic import BaseModel


class Response(DuckResponse):
    @classmethod
    def from_model(cls, model: BaseModel, status_code: int = 200) -> Self:
        return cls(
            status_code=status_code,
            body=model.model_dump_json(),
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def html(cls, body: str, status_code: int = 200) -> Self:
        return cls(
            status_code=status_code,
            body=body,
            headers={"Content-Type": "text/html; charset=utf-8"},
        )

    @classmethod
    def location(cls, url: str, status_code: int = 302) -> Self:
        return cls(
            status_code=status_code,
            body="",
            headers={"Location": url},
        )
