import re

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import AnyUrl, TypeAdapter, ValidationError

from backend_utils.shared import Logger

logger = Logger(__name__).get_logger()

_EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}(?:\.[a-zA-Z]{2,})?$"
)
_url_adapter = TypeAdapter(AnyUrl)

JSON_BODY_HINT = (
    "Ensure that all keys and values are properly enclosed in double quotes."
)


async def check_url_accessibility(
    url: str,
    *,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Returns True if a HEAD request to `url` succeeds."""
    try:
        async with httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        ) as client:
            response = await client.head(url)
            response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.debug("URL %s is not accessible: %s", url, e)
        return False

    return True


def is_valid_url(input_url: str) -> bool:
    try:
        _url_adapter.validate_python(input_url)
    except ValidationError:
        return False
    return True


def is_valid_email(email: str) -> bool:
    """
    Checks the format of an email address.

    is_valid_email("test@example.com") -> True
    is_valid_email("invalid-email") -> False
    """
    _, _, domain = email.partition("@")
    if ".." in domain:
        return False

    return _EMAIL_PATTERN.match(email) is not None


def check_json_body(exc: RequestValidationError) -> JSONResponse | None:
    """Describes a malformed JSON body, or returns None for any other validation error."""
    for error in exc.errors():
        if error.get("type") != "json_invalid":
            continue

        loc = error.get("loc", ())
        position = loc[1] if len(loc) > 1 else "Unknown"
        detail = error.get("ctx", {}).get("error", error.get("msg", ""))

        return JSONResponse(
            status_code=400,
            content={
                "message": "Invalid JSON format.",
                "details": {
                    "type": error["type"],
                    "error": str(detail).split("\n")[0],
                    "position": position,
                    "hint": JSON_BODY_HINT,
                },
            },
        )

    return None


async def check_request_validity(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answers request validation failures with 400 and the list of errors."""
    response = check_json_body(exc)
    if response is not None:
        logger.warning("Rejected malformed JSON body on %s", request.url.path)
        return response

    logger.warning("Rejected invalid request on %s", request.url.path)
    return JSONResponse(
        status_code=400,
        content={"errors": jsonable_encoder(exc.errors())},
    )


def install_validation_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, check_request_validity)
