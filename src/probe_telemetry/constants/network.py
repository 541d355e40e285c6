"""Network and HTTP constants.

These constants define HTTP status code boundaries used when classifying
API responses and probe results.
"""

# HTTP status codes
HTTP_SUCCESS_MIN = 200  # Minimum HTTP status code for success
HTTP_REDIRECT_MIN = 300  # First status code outside the 2xx range
HTTP_NOT_FOUND = 404
HTTP_CLIENT_ERROR_MIN = 400  # Minimum HTTP status code for client errors

__all__ = [
    "HTTP_SUCCESS_MIN",
    "HTTP_REDIRECT_MIN",
    "HTTP_CLIENT_ERROR_MIN",
    "HTTP_NOT_FOUND",
]
