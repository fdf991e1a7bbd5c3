from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException, Throttled


def custom_exception_handler(exc, context):
    """
    Intercept any DRF exception and render it with the project's error
    envelope. Throttled errors get a message based on the throttle `scope`;
    everything else keeps DRF's status code and detail.
    """
    # Let DRF build the default error response first (it will include a 429
    # status code and a Retry-After header for Throttled exceptions).
    response = exception_handler(exc, context)

    if response is None:
        return response

    if isinstance(exc, Throttled):
        view = context.get("view", None)
        throttles = [] if view is None else getattr(view, "get_throttles", lambda: [])()
        scope = None
        if throttles:
            scope = getattr(throttles[0], "scope", None)

        wait_seconds = int(exc.wait) if exc.wait is not None else None

        if scope == "offer_create":
            detail = "Too many offers. Please wait before making another offer."
        elif scope == "offer_counter":
            detail = "Too many counter-offers. Please wait before countering again."
        else:
            if wait_seconds is not None:
                detail = f"Request rate limit exceeded. Please wait {wait_seconds} seconds and try again."
            else:
                detail = "Request rate limit exceeded. Please try again later."

        response.data = {
            "status": "error",
            "message": detail,
            "retry_after": wait_seconds,
        }
        response.status_code = 429  # ensure HTTP 429
        return response

    if isinstance(exc, APIException):
        detail = exc.detail
        if isinstance(detail, list) and len(detail) == 1:
            detail = detail[0]
        code = getattr(detail, "code", None) or exc.default_code
        response.data = {
            "status": "error",
            "status_code": response.status_code,
            "message": detail,
            "code": code,
        }

    return response
