"""Launch routes for the SMART-on-FHIR client.

Provides:
- GET / - EHR launch, authorization callback and session resume
- GET /session - Current session as JSON
- POST /logout - Clear the session
"""

from cross_web import AsyncHTTPRequest

from ._orchestrator import LaunchOrchestrator, LaunchState
from ._route import Route
from ._views import render_page
from .utils._response import Response


class LaunchManager:
    """Manager for the launch page and session routes."""

    async def launch(
        self, request: AsyncHTTPRequest, orchestrator: LaunchOrchestrator
    ) -> Response:
        """Run the launch state machine for this page load.

        A fresh launch answers with a redirect to the authorization server,
        everything else renders the status page.
        """
        outcome = await orchestrator.evaluate(dict(request.query_params))

        if outcome.state is LaunchState.REDIRECT:
            assert outcome.redirect_url is not None

            return Response.location(outcome.redirect_url)

        return Response.html(
            render_page(outcome, orchestrator.config),
            status_code=outcome.status_code,
        )

    async def get_session(
        self, request: AsyncHTTPRequest, orchestrator: LaunchOrchestrator
    ) -> Response:
        """Resume the stored session and return it as JSON.

        Query parameters are ignored, this never starts a launch or exchanges
        a code.
        """
        outcome = await orchestrator.evaluate({})

        return Response.from_model(outcome, status_code=outcome.status_code)

    async def logout(
        self, request: AsyncHTTPRequest, orchestrator: LaunchOrchestrator
    ) -> Response:
        orchestrator.logout()

        return Response.location("./", status_code=303)

    @property
    def routes(self) -> list[Route]:
        return [
            Route(
                path="/",
                methods=["GET"],
                function=self.launch,
                operation_id="launch",
                summary="EHR launch, authorization callback and session resume",
                include_in_schema=False,
            ),
            Route(
                path="/session",
                methods=["GET"],
                function=self.get_session,
                operation_id="get_session",
                summary="Get the current patient and observations",
            ),
            Route(
                path="/logout",
                methods=["POST"],
                function=self.logout,
                operation_id="logout",
                summary="Logout (clear the session)",
            ),
        ]
