import time
import uuid
from typing import Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from accounts.core.logger import request_id_var


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a short ID, shared by all log lines written while
    handling it and returned to the client as X-Request-ID.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        start_time = time.time()

        # Peer address only, the trusted client address is resolved where it is needed
        peer = request.client.host if request.client else "unknown"

        logger.trace(
            f"{request.method} {request.url.path} - Peer: {peer} - "
            f"User-Agent: {request.headers.get('user-agent', 'unknown')}"
        )

        try:
            response: Response = await call_next(request)

            process_time = time.time() - start_time
            logger.trace(
                f"{request.method} {request.url.path} - "
                f"Status: {response.status_code} - Time: {process_time:.3f}s"
            )

            response.headers["X-Request-ID"] = request_id

            return response

        except Exception as e:
            process_time = time.time() - start_time

            # Request bodies carry passwords, so they are never logged
            logger.error(
                f"{request.method} {request.url.path} - "
                f"Error: {e!r} - Time: {process_time:.3f}s",
                request_query_params=request.query_params,
                request_path_params=request.path_params,
            )
            raise e
        finally:
            request_id_var.reset(token)
