import time
import uuid
from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

TRACE_HEADER = "X-Trace-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tags every log record of a request with its trace id and logs timing."""

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER, str(uuid.uuid4()))
        request.state.trace_id = trace_id

        with logger.contextualize(trace_id=trace_id):
            log = logger.bind(channel="http")
            start_time = time.time()
            log.info(f"Request Started | Method: {request.method} | Path: {request.url.path}")

            try:
                response = await call_next(request)
            except Exception as e:
                process_time = (time.time() - start_time) * 1000
                log.error(f"Request Failed | Error: {str(e)} | Duration: {process_time:.2f}ms")
                raise

            process_time = (time.time() - start_time) * 1000
            log.info(f"Request Finished | Status: {response.status_code} | Duration: {process_time:.2f}ms")
            response.headers[TRACE_HEADER] = trace_id
            return response
