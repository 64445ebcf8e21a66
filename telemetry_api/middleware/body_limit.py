from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                return JSONResponse(
                    status_code=400, content={"error": "invalid content-length"}
                )

            if declared > request.app.state.settings.max_body_bytes:
                return JSONResponse(
                    status_code=413, content={"error": "payload too large"}
                )

        response = await call_next(request)
        return response
