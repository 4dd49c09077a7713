"""JSON Responses — every endpoint response is JSON and never cached."""

from fastapi.responses import JSONResponse

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


def json_response(status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=content, headers=NO_STORE_HEADERS,
    )
