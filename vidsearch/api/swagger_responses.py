"""
OpenAPI response examples for the shared envelope

Used in ``responses=`` on route decorators so the docs show the envelope
rather than the bare response model.
"""

from typing import Any, Dict

_EXAMPLE_META = {
    "requestId": "5f0c6a52-1d0e-4a57-9b7e-8c1f0b3f9d21",
    "timestamp": "2026-10-19T09:30:00Z",
}

_ERROR_EXAMPLES: dict[int, tuple[str, str, str, str | None]] = {
    400: ("Bad Request", "ValidationError", "query must not be empty", None),
    401: ("Unauthorized", "HTTP.401", "Not authenticated", "Send a Bearer token"),
    404: ("Not Found", "RecordNotFoundError", "SearchHistory(id=...) not found", None),
    422: ("Unprocessable Entity", "ValidationError", "body.query: Field required", None),
    500: ("Internal Server Error", "INTERNAL.UNEXPECTED", "Unexpected server error.", None),
    503: (
        "Service Unavailable",
        "EmbeddingFailedError",
        "Embedding timed out after 10.0s",
        "Retry the search shortly",
    ),
}


def _envelope(*, success: bool, data: Any = None, error: dict | None = None) -> dict:
    return {
        "success": success,
        "data": data,
        "error": error,
        "meta": _EXAMPLE_META,
        "feedback": [],
    }


def success_response_example(
    status_code: int = 200,
    data_example: Any = None,
) -> Dict[int, Dict[str, Any]]:
    if status_code == 204:
        return {}

    return {
        status_code: {
            "description": "Created" if status_code == 201 else "Successful Response",
            "content": {
                "application/json": {
                    "example": _envelope(success=True, data=data_example or {}),
                }
            },
        }
    }


def error_response_examples() -> Dict[int, Dict[str, Any]]:
    examples: Dict[int, Dict[str, Any]] = {}
    for status_code, (description, code, message, hint) in _ERROR_EXAMPLES.items():
        examples[status_code] = {
            "description": description,
            "content": {
                "application/json": {
                    "example": _envelope(
                        success=False,
                        error={"code": code, "message": message, "details": None, "hint": hint},
                    ),
                }
            },
        }
    return examples


def combined_responses(
    status_code: int = 200,
    data_example: Any = None,
    include_errors: list[int] | None = None,
) -> Dict[int, Dict[str, Any]]:
    """
    Success example plus the listed error examples.

    Args:
        status_code: Success HTTP status
        data_example: Example ``data`` payload
        include_errors: Error statuses to document (default: 400, 404, 500)
    """
    if include_errors is None:
        include_errors = [400, 404, 500]

    responses = success_response_example(status_code, data_example)
    error_examples = error_response_examples()

    for error_code in include_errors:
        if error_code in error_examples:
            responses[error_code] = error_examples[error_code]

    return responses
