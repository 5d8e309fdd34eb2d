"""HTTP layer: response envelope, error mapping, middleware, and routers."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    ErrorCodes,
    error_json,
    error_response,
    get_request_id,
    success_response,
)
