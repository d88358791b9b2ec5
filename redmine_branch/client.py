"""Redmine API client.

Usage:
    client = RedmineClient(url="https://redmine.example.com", api_key="0123abcd")
    body   = client.get_issue_body(26968)    # raw JSON text of /issues/26968.json
"""

import requests

API_KEY_HEADER = "X-Redmine-API-Key"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class RedmineClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(RedmineClientError):
    """Raised on HTTP 401/403 — invalid API key or REST API disabled."""


class NotFoundError(RedmineClientError):
    """Raised on HTTP 404 — ticket does not exist or is not visible."""


class NetworkError(RedmineClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class RedmineClient:
    """Thin wrapper around the Redmine REST API."""

    def __init__(self, url: str, api_key: str, timeout: int = 30, verify: bool = True) -> None:
        self.base_url = url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers[API_KEY_HEADER] = api_key
        self._verify = verify

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def issue_url(self, ticket_id: int) -> str:
        return f"{self.base_url}/issues/{ticket_id}.json"

    def get_issue_body(self, ticket_id: int) -> str:
        """Fetch a ticket and return the raw response body.

        Parsing is left to ``models.parse_ticket`` so the body can be echoed
        back when it is not what we expect.

        Raises:
            AuthenticationError: HTTP 401 or 403
            NotFoundError:       HTTP 404
            RedmineClientError:  Any other non-2xx response
            NetworkError:        Timeout or connection failure
        """
        return self._request(self.issue_url(ticket_id))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, url: str) -> str:
        try:
            response = self._session.get(url, timeout=self._timeout, verify=self._verify)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.SSLError as exc:
            raise NetworkError(
                f"TLS verification failed for '{self.base_url}' "
                "(set server.verify_ssl to false for self-signed certificates)"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach Redmine server at '{self.base_url}'"
            ) from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Authentication failed — check your API key and that the REST API is enabled."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Ticket not found: {url}")
        if not response.ok:
            raise RedmineClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        return response.text
