import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from teller_iam.api.utils.jwt import decode_token
from teller_iam.app.services.route_gate import RedirectTo, Reject, authorize_request, is_gated
from teller_iam.depends import read_session_token

logger = logging.getLogger(__name__)


class RouteGateMiddleware(BaseHTTPMiddleware):
    """Applies the route authorization gate to page paths before any handler runs"""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_gated(path):
            return await call_next(request)

        token = read_session_token(request)
        claims = decode_token(token) if token else None
        decision = authorize_request(path, request.query_params.get("callbackUrl"), claims)

        if isinstance(decision, RedirectTo):
            return RedirectResponse(
                decision.location, status_code=status.HTTP_307_TEMPORARY_REDIRECT
            )

        if isinstance(decision, Reject):
            logger.warning(f"Gate rejected {path}: {decision.reason}")
            return JSONResponse(
                status_code=decision.status_code,
                content={
                    "error": {
                        "code": "FORBIDDEN",
                        "message": "You do not have access to this page",
                    }
                },
            )

        return await call_next(request)
