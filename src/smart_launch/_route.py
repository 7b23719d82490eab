from collections.abc import Awaitable, Callable
from typing import Any

from cross_web import AsyncHTTPRequest, Response

from ._orchestrator import LaunchOrchestrator


class Route:
    def __init__(
        self,
        path: str,
        methods: list[str],
        function: Callable[[AsyncHTTPRequest, LaunchOrchestrator], Awaitable[Response]],
        operation_id: str | None = None,
        summary: str | None = None,
        include_in_schema: bool = True,
    ):
        self.path = path
        self.methods = methods
        self.function = function
        self.operation_id = operation_id
        self.summary = summary
        self.include_in_schema = include_in_schema

    def to_fastapi_endpoint(
        self, orchestrator: LaunchOrchestrator
    ) -> Callable[..., Any]:
        from fastapi import Request as FastAPIRequest
        from fastapi import Response as FastAPIResponse

        async def wrapper(request: FastAPIRequest) -> FastAPIResponse:
            route_request = AsyncHTTPRequest.from_fastapi(request)

            route_response = await self.function(route_request, orchestrator)

            return route_response.to_fastapi()

        return wrapper
