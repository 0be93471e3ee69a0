"""GitHub remote object store."""

from .client import GitHubClient, get_github_client, raise_for_status, read_token
from .store import GitHubObjectStore, get_object_store

__all__ = [
    "GitHubClient",
    "GitHubObjectStore",
    "get_github_client",
    "get_object_store",
    "raise_for_status",
    "read_token",
]
