"""Fatal status classification.

Private module - import from _retry package.
"""

from __future__ import annotations

__all__ = [
    'FATAL_STATUS_CODES',
    'is_fatal_status',
]

# Client errors an as-is retry cannot fix
# 400: Bad Request
# 401: Unauthorized
# 402: Payment Required
# 403: Forbidden
# 404: Not Found
# 405: Method Not Allowed
# 413: Request Entity Too Large
# 414: Request URI Too Long
# 415: Unsupported Media Type
FATAL_STATUS_CODES = frozenset({400, 401, 402, 403, 404, 405, 413, 414, 415})


def is_fatal_status(status_code: int | None) -> bool:
    """Check if a status makes further attempts pointless.

    A missing status is fatal. Everything outside FATAL_STATUS_CODES is
    retryable, including 429, 5xx and the -1 of a transport failure.
    """
    return status_code is None or status_code in FATAL_STATUS_CODES
