import requests
from typing import Callable, Optional

from configwatch.domain.http_response import HttpResponse
from configwatch.exceptions import TransportError


class HttpService:
    """
    HTTP client wrapper for talking to the remote config service.

    Requires http_client callable for dependency injection (DIP compliance).
    This enables easy testing without patching and allows swapping HTTP libraries.
    """

    def __init__(self, user_agent: str, http_client: Callable, timeout: float = 10):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client

    def get(self, url: str, params: Optional[dict] = None, timeout: Optional[float] = None) -> HttpResponse:
        """GET `url` and return status code, body text and Content-Type.

        `timeout` overrides the default, which long-poll requests need.
        """
        headers = {"User-Agent": self.user_agent}
        try:
            resp = self.http_client(
                url,
                params=params,
                headers=headers,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(url, e) from e

        # Extract Content-Type if response has headers; let real exceptions bubble up.
        ct = None
        if hasattr(resp, 'headers'):
            ct = resp.headers.get('Content-Type')

        return HttpResponse(resp.status_code, resp.text, ct)
