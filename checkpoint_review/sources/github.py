# checkpoint_review/sources/github.py
"""Changed-file listing for GitHub pull requests."""

import logging
import re
from dataclasses import dataclass

import httpx

from checkpoint_review.errors import InputError

logger = logging.getLogger(__name__)

PR_URL_PATTERN = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")
PAGE_SIZE = 100


@dataclass(frozen=True)
class PullRequestRef:
    owner: str
    repo: str
    number: int

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


def parse_pr_url(url: str) -> PullRequestRef:
    """
    Extract owner, repo and number from a pull-request URL.

    Raises:
        InputError: If the URL is not a GitHub pull-request URL
    """
    match = PR_URL_PATTERN.search(url)
    if not match:
        raise InputError(
            "Invalid GitHub PR URL format. Expected: https://github.com/owner/repo/pull/123"
        )
    owner, repo, number = match.groups()
    return PullRequestRef(owner=owner, repo=repo, number=int(number))


class GitHubPullRequestSource:
    """
    Lists the files changed by a pull request via the GitHub REST API.

    Works unauthenticated for public repositories; a token raises the rate
    limit and unlocks private ones.
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def list_files(self, pr_url: str) -> list[str]:
        """
        All file names changed by the pull request, across every page.

        Raises:
            InputError: Bad URL, authentication failure, rate limit, unknown PR
                or any other API failure
        """
        ref = parse_pr_url(pr_url)
        logger.info(f"Fetching files from PR: {ref}")
        endpoint = f"{self._api_url}/repos/{ref.owner}/{ref.repo}/pulls/{ref.number}/files"

        filenames: list[str] = []
        async with httpx.AsyncClient(
            headers=self._headers(), timeout=self._timeout, transport=self._transport
        ) as http:
            page = 1
            while True:
                try:
                    response = await http.get(endpoint, params={"per_page": PAGE_SIZE, "page": page})
                except httpx.HTTPError as e:
                    raise InputError(f"GitHub API error: {e}") from e
                self._raise_for_status(response, ref)

                batch = response.json()
                filenames.extend(entry["filename"] for entry in batch)
                if len(batch) < PAGE_SIZE:
                    break
                page += 1

        logger.info(f"PR {ref} changes {len(filenames)} file(s)")
        return filenames

    @staticmethod
    def _raise_for_status(response: httpx.Response, ref: PullRequestRef) -> None:
        if response.status_code == 401:
            raise InputError("GitHub authentication failed. Please set GITHUB_TOKEN environment variable")
        if response.status_code == 403:
            raise InputError("GitHub API rate limit exceeded. Please set GITHUB_TOKEN for higher limits")
        if response.status_code == 404:
            raise InputError(f"GitHub PR not found: {ref}")
        if response.is_error:
            raise InputError(f"GitHub API error: HTTP {response.status_code}")
