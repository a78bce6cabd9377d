"""Access gate middleware."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from sunnah_backend.access.gate import AccessGate, Rejected


class AccessGateMiddleware(BaseHTTPMiddleware):
    """
    Run the access gate in front of the routes.

    The gate is read from ``app.state.access_gate`` on every request so it can
    be created in the lifespan handler. Rejections short-circuit with an empty
    body and the gate's headers (``Retry-After`` on 429).
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The gate's rejection or the response from downstream handlers
        """
        if not AccessGate.applies_to(request.url.path):
            return await call_next(request)

        gate: AccessGate = request.app.state.access_gate
        decision = await gate.evaluate(request)

        if isinstance(decision, Rejected):
            return Response(status_code=decision.status_code, headers=decision.headers)

        return await call_next(request)
