from typing import Optional

import httpx


class RecordingClient:
    """
    Stand-in for ServiceClient that records each forwarded request and
    returns a canned response (or raises ``error`` when given).
    """

    def __init__(
        self,
        response: Optional[httpx.Response] = None,
        error: Optional[Exception] = None,
    ):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def request(self, method: str, path: str, *, content=None, headers=None):
        self.calls.append(
            {"method": method, "path": path, "content": content, "headers": headers or {}}
        )
        if self.error is not None:
            raise self.error
        return self.response


def make_response(
    status_code: int,
    json_data=None,
    method: str = "GET",
    path: str = "/",
) -> httpx.Response:
    """
    Convenience wrapper to build httpx responses with request context.
    """
    request = httpx.Request(method, f"http://test{path}")
    if json_data is None:
        return httpx.Response(status_code, content=b"", request=request)
    return httpx.Response(status_code, json=json_data, request=request)
