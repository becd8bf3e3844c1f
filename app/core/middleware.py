# app/core/middleware.py
"""Request tracing middleware"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Probes hit these constantly
QUIET_PATHS = ("/health",)


async def correlation_id_middleware(request: Request, call_next):
    """Propagate X-Correlation-ID (or mint one) so logs and the frontend can be matched"""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """One log line per request with status and duration"""
    if request.url.path.startswith(QUIET_PATHS):
        return await call_next(request)

    start_time = time.time()
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            f"[{correlation_id}] {request.method} {request.url.path} failed after "
            f"{round((time.time() - start_time) * 1000, 2)}ms"
        )
        raise

    duration_ms = round((time.time() - start_time) * 1000, 2)
    log = logger.warning if response.status_code >= 500 else logger.info
    log(
        f"[{correlation_id}] {request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
        extra={
            "correlation_id": correlation_id,
            "client": request.client.host if request.client else "unknown",
        }
    )

    return response
