"""
JSON response envelope for the shortlink API.

Every JSON body carries a `status` of "OK" or "ERROR"; errors add an
`error` message and successful creates add the `alias`.

    {"status": "OK", "alias": "ex1"}
    {"status": "ERROR", "error": "not found"}
"""

from typing import Any, Dict, Iterable, Mapping

STATUS_OK = "OK"
STATUS_ERROR = "ERROR"


def ok(**fields: Any) -> Dict[str, Any]:
    return {"status": STATUS_OK, **fields}


def error(message: str) -> Dict[str, Any]:
    return {"status": STATUS_ERROR, "error": message}


def validation_error(errors: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Render pydantic/FastAPI validation errors as one readable message.

    Args:
        errors: Items shaped like `RequestValidationError.errors()`
            (each with "loc" and "type").

    Returns:
        dict: Error envelope such as
            {"status": "ERROR", "error": "field url is required to fill"}
    """
    messages = []
    for err in errors:
        loc = tuple(err.get("loc", ()))
        kind = err.get("type", "")
        if kind == "json_invalid" or len(loc) < 2 or not isinstance(loc[-1], str):
            message = "failed to decode request"
        elif kind == "missing":
            message = f"field {loc[-1]} is required to fill"
        elif loc[-1] == "url" and kind == "value_error":
            message = f"field {loc[-1]} is not valid URL"
        else:
            message = f"field {loc[-1]} is not valid"
        if message not in messages:
            messages.append(message)
    return error(", ".join(messages) or "invalid request")
