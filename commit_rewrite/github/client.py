"""GitHub API client setup and request helpers."""

import json
import os

import urllib3
from urllib3.util import Retry, Timeout

from ..config import (
    DEFAULT_API_URL,
    HTTP_CONNECT_TIMEOUT,
    HTTP_GET_RETRIES,
    HTTP_READ_TIMEOUT,
    TOKEN_ENV_VARS,
    __version__,
)
from ..errors import Conflict, Forbidden, InvalidInput, RemoteNotFound, RewriteError, Transient


def read_token(env_path=".env"):
    """
    Read the API token from the environment or a .env file.

    Raises InvalidInput if no token is found.
    """
    for var in TOKEN_ENV_VARS:
        token = os.environ.get(var)
        if token:
            return token

    if os.path.exists(env_path):
        with open(env_path, "r") as env_file:
            for line in env_file:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                if key.strip() in TOKEN_ENV_VARS:
                    return value.strip().strip('"').strip("'")

    raise InvalidInput(f"{' or '.join(TOKEN_ENV_VARS)} is not set in the environment or .env file")


def error_message(data, fallback):
    """Pull the human-readable message out of a GitHub error body."""
    if isinstance(data, dict) and data.get("message"):
        return data["message"]
    return fallback


def raise_for_status(status, data, what):
    """
    Map a GitHub error response onto the error taxonomy.

    Args:
        status: HTTP status code
        data: Decoded response body
        what: Short description of the request, used in messages
    """
    if status < 300:
        return
    message = f"{what}: {error_message(data, f'HTTP {status}')}"
    if status == 404:
        raise RemoteNotFound(message)
    if status in (401, 403):
        if "rate limit" in message.lower():
            raise Transient(message)
        raise Forbidden(message)
    if status == 409:
        raise Conflict(message)
    if status == 422:
        raise InvalidInput(message)
    if status == 429 or status >= 500:
        raise Transient(message)
    raise RewriteError(message)


class GitHubClient:
    """Thin JSON-over-HTTP wrapper around a urllib3 pool."""

    def __init__(self, token, api_url=DEFAULT_API_URL, pool=None):
        self.api_url = api_url.rstrip("/")
        self.headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": f"commit-rewrite/{__version__}",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self.pool = pool or urllib3.PoolManager(
            timeout=Timeout(connect=HTTP_CONNECT_TIMEOUT, read=HTTP_READ_TIMEOUT),
        )

    def request(self, method, path, payload=None):
        """
        Send one request and return (status, decoded_json_body).

        Only GETs are retried, and only on gateway errors; anything else that
        fails at the transport level is raised as Transient.
        """
        url = f"{self.api_url}/{path.lstrip('/')}"
        if method == "GET":
            retries = Retry(
                total=HTTP_GET_RETRIES,
                backoff_factor=0.5,
                status_forcelist=(502, 503, 504),
                allowed_methods=frozenset({"GET"}),
                raise_on_status=False,
            )
        else:
            retries = False
        body = json.dumps(payload).encode("utf-8") if payload is not None else None

        try:
            response = self.pool.request(
                method, url, body=body, headers=self.headers, retries=retries
            )
        except urllib3.exceptions.HTTPError as exc:
            raise Transient(f"{method} {url} failed: {exc}") from exc

        data = None
        if response.data:
            try:
                data = json.loads(response.data.decode("utf-8"))
            except ValueError:
                data = {"message": response.data.decode("utf-8", errors="ignore").strip()}
        return response.status, data


def get_github_client(token=None, api_url=None):
    """Build a client from an explicit token or the environment."""
    return GitHubClient(token or read_token(), api_url=api_url or DEFAULT_API_URL)
