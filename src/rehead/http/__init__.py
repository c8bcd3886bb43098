"""rehead.http — in-memory HTTP message types.

Provides Headers, HttpRequest and HttpResponse, which satisfy the
host-facing protocols in rehead._types.
"""

from rehead.http._headers import Headers
from rehead.http._request import HttpRequest, HttpResponse

__all__ = [
    "Headers",
    "HttpRequest",
    "HttpResponse",
]
