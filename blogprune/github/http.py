"""GitHub Git Data API client (small, dependency-free).

Covers the endpoints a batch delete needs:
  - GET   /repos/{owner}/{repo}/git/ref/heads/{branch}
  - GET   /repos/{owner}/{repo}/git/commits/{sha}
  - GET   /repos/{owner}/{repo}/git/trees/{sha}[?recursive=1]
  - POST  /repos/{owner}/{repo}/git/trees
  - POST  /repos/{owner}/{repo}/git/commits
  - PATCH /repos/{owner}/{repo}/git/refs/heads/{branch}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from .. import __version__
from ..errors import StorageAuthError, StorageError

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"


@dataclass(frozen=True)
class GitHubHttpConfig:
    owner: str
    repo: str
    api_url: str = "https://api.github.com"
    timeout_s: float = 10.0


def _error_message(e: HTTPError) -> str:
    try:
        payload = json.loads(e.read().decode("utf-8"))
    except (ValueError, OSError):
        return str(e.reason)
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return str(e.reason)


class GitHubHttpClient:
    """Minimal GitHub REST client for the Git Data API."""

    def __init__(self, cfg: GitHubHttpConfig) -> None:
        if not cfg.owner or not cfg.repo:
            raise ValueError("owner and repo are required")
        self._cfg = cfg
        base = cfg.api_url.rstrip("/")
        self._repo_url = f"{base}/repos/{quote(cfg.owner, safe='')}/{quote(cfg.repo, safe='')}"

    @property
    def repo_url(self) -> str:
        return self._repo_url

    def request(
        self,
        method: str,
        path: str,
        *,
        token: str,
        body: dict[str, Any] | None = None,
        query: dict[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON payload."""
        url = f"{self._repo_url}/{path.lstrip('/')}"
        if query:
            url = f"{url}?{urlencode(query)}"
        data = json.dumps(body).encode("utf-8") if body is not None else None

        req = Request(
            url,
            data=data,
            method=method,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "Content-Type": "application/json",
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": f"blogprune/{__version__}",
            },
        )
        logger.debug("%s %s", method, url)
        try:
            with urlopen(req, timeout=self._cfg.timeout_s) as resp:
                raw = resp.read()
        except HTTPError as e:
            message = _error_message(e)
            if e.code == 401:
                raise StorageAuthError(f"GitHub authentication failed: {message}", status=e.code) from e
            raise StorageError(f"GitHub HTTP error {e.code}: {message}", status=e.code) from e
        except URLError as e:
            raise StorageError(f"GitHub connection error: {e.reason}") from e
        except TimeoutError as e:
            raise StorageError(f"GitHub request timed out after {self._cfg.timeout_s}s") from e
        except (OSError, HTTPException) as e:
            raise StorageError(f"GitHub connection error while reading {method} {path}: {e!r}") from e

        if not raw:
            return {}
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as e:
            # Covers UnicodeDecodeError and JSONDecodeError (e.g. an HTML proxy page)
            raise StorageError(f"GitHub returned a non-JSON response for {method} {path}") from e

    # -------------------------------------------------------------------------
    # Git Data API
    # -------------------------------------------------------------------------

    def get_ref(self, token: str, branch: str) -> dict[str, Any]:
        return self.request("GET", f"git/ref/heads/{quote(branch)}", token=token)

    def get_commit(self, token: str, sha: str) -> dict[str, Any]:
        return self.request("GET", f"git/commits/{sha}", token=token)

    def get_tree(self, token: str, sha: str, *, recursive: bool = False) -> dict[str, Any]:
        query = {"recursive": "1"} if recursive else None
        return self.request("GET", f"git/trees/{sha}", token=token, query=query)

    def create_tree(self, token: str, base_tree: str, items: list[dict[str, Any]]) -> dict[str, Any]:
        return self.request("POST", "git/trees", token=token, body={"base_tree": base_tree, "tree": items})

    def create_commit(self, token: str, message: str, tree: str, parents: list[str]) -> dict[str, Any]:
        return self.request(
            "POST",
            "git/commits",
            token=token,
            body={"message": message, "tree": tree, "parents": parents},
        )

    def update_ref(self, token: str, branch: str, sha: str, *, force: bool = False) -> dict[str, Any]:
        return self.request(
            "PATCH",
            f"git/refs/heads/{quote(branch)}",
            token=token,
            body={"sha": sha, "force": force},
        )
