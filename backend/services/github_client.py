"""
GitHub API client

Maps a repo or user to the list of related accounts shown on a badge
(contributors, stargazers, forkers, watchers, followers, sponsors).
REST for everything except sponsors, which need GraphQL; without a token,
or when GraphQL fails, sponsors come from a public fallback service.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from config import settings
from models.user import User

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_GRAPHQL_ENDPOINT = f"{GITHUB_API_BASE}/graphql"
GITHUB_MAX_PER_PAGE = 100
DEFAULT_LIMIT = 96

SPONSORS_QUERY = """
query($username: String!, $limit: Int!) {
  user(login: $username) {
    sponsorshipsAsMaintainer(first: $limit) {
      edges {
        node {
          sponsorEntity {
            ... on User {
              login
              name
              avatarUrl: avatarUrl(size: 100)
            }
            ... on Organization {
              login
              name
              avatarUrl: avatarUrl(size: 100)
            }
          }
        }
      }
    }
  }
}
"""


class GitHubAPIError(Exception):
    """GitHub (or the sponsors fallback) answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, endpoint: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


def _user_from_rest(data: Dict[str, Any]) -> User:
    return User(
        login=data.get("login") or "",
        name=data.get("name") or "",
        avatar_url=data.get("avatar_url") or "",
    )


class GitHubClient:
    """Async GitHub client with optional token auth."""

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        fallback_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = settings.github_token if token is None else token
        self.timeout = settings.github_timeout if timeout is None else timeout
        self.fallback_url = (fallback_url or settings.sponsors_fallback_url).rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _auth_headers(self, graphql: bool = False) -> Dict[str, str]:
        headers = {}
        if self.token:
            scheme = "bearer" if graphql else "token"
            headers["Authorization"] = f"{scheme} {self.token}"
        if graphql:
            headers["Content-Type"] = "application/json"
            headers["User-Agent"] = "GitHub GraphQL API"
        return headers

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = endpoint if endpoint.startswith("http") else f"{GITHUB_API_BASE}{endpoint}"
        logger.debug(f"GitHub API request: {url}")

        async with self._client() as client:
            resp = await client.get(url, params=params, headers=self._auth_headers())
            if not resp.is_success:
                raise GitHubAPIError(
                    f"GitHub API returned a {resp.status_code} {resp.reason_phrase or 'Unknown Error'}",
                    resp.status_code,
                    endpoint,
                )
            return resp.json()

    async def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        logger.debug("GitHub GraphQL request")

        async with self._client() as client:
            resp = await client.post(
                GITHUB_GRAPHQL_ENDPOINT,
                json={"query": query, "variables": variables},
                headers=self._auth_headers(graphql=True),
            )
            if not resp.is_success:
                raise GitHubAPIError(f"GitHub API returned a {resp.status_code}", resp.status_code, "graphql")
            payload = resp.json()

        # GraphQL reports query errors with a 200 status
        if payload.get("errors") and not payload.get("data"):
            messages = "; ".join(err.get("message") or err.get("type") or "unknown" for err in payload["errors"])
            raise GitHubAPIError(f"GitHub GraphQL returned errors: {messages}", resp.status_code, "graphql")
        return payload

    async def _list_users(self, endpoint: str, limit: int) -> List[User]:
        data = await self._get(endpoint, params={"per_page": min(limit, GITHUB_MAX_PER_PAGE)})
        return [_user_from_rest(item) for item in data]

    # =========================================================================
    # Repository relations
    # =========================================================================

    async def fetch_contributors(self, owner: str, repo: str, limit: int = DEFAULT_LIMIT) -> List[User]:
        return await self._list_users(f"/repos/{owner}/{repo}/contributors", limit)

    async def fetch_stargazers(self, owner: str, repo: str, limit: int = DEFAULT_LIMIT) -> List[User]:
        return await self._list_users(f"/repos/{owner}/{repo}/stargazers", limit)

    async def fetch_watchers(self, owner: str, repo: str, limit: int = DEFAULT_LIMIT) -> List[User]:
        return await self._list_users(f"/repos/{owner}/{repo}/subscribers", limit)

    async def fetch_forkers(self, owner: str, repo: str, limit: int = DEFAULT_LIMIT) -> List[User]:
        """Owners of the repo's forks. Forks carry no display name, so login is used."""
        forks = await self._get(
            f"/repos/{owner}/{repo}/forks",
            params={"per_page": min(limit, GITHUB_MAX_PER_PAGE)},
        )
        return [
            User(
                login=fork["owner"]["login"],
                name=fork["owner"]["login"],
                avatar_url=fork["owner"].get("avatar_url") or "",
            )
            for fork in forks
        ]

    # =========================================================================
    # User relations
    # =========================================================================

    async def fetch_followers(self, username: str, limit: int = DEFAULT_LIMIT) -> List[User]:
        return await self._list_users(f"/users/{username}/followers", limit)

    async def _fetch_sponsors_fallback(self, username: str) -> List[User]:
        logger.debug(f"Using fallback sponsors API for {username}")

        async with self._client() as client:
            resp = await client.get(f"{self.fallback_url}/{username}")
            if not resp.is_success:
                raise GitHubAPIError(
                    f"GitHub API returned a {resp.status_code} {resp.reason_phrase or 'Unknown Error'}",
                    resp.status_code,
                    "fallback-sponsors",
                )
            return [
                User(
                    login=item.get("login") or "",
                    name=item.get("name") or "",
                    avatar_url=item.get("avatarUrl") or "",
                )
                for item in resp.json()
            ]

    async def fetch_sponsors(self, username: str, limit: int = DEFAULT_LIMIT) -> List[User]:
        """Sponsors via GraphQL, or the fallback service when there is no token or GraphQL fails."""
        if not self.token:
            return await self._fetch_sponsors_fallback(username)

        variables = {"username": username, "limit": min(limit, GITHUB_MAX_PER_PAGE)}
        try:
            data = await self._graphql(SPONSORS_QUERY, variables)
        except GitHubAPIError as e:
            logger.warning(f"GraphQL sponsors request failed for {username}, trying fallback")
            try:
                return await self._fetch_sponsors_fallback(username)
            except Exception:
                raise e

        user = (data.get("data") or {}).get("user")
        if not user:
            raise ValueError(f"User {username} not found or has no sponsors")

        sponsors = []
        for edge in user["sponsorshipsAsMaintainer"]["edges"]:
            entity = edge["node"]["sponsorEntity"] or {}
            sponsors.append(User(
                login=entity.get("login") or "",
                name=entity.get("name") or "",
                avatar_url=entity.get("avatarUrl") or "",
            ))
        return sponsors


# Singleton instance
github_client = GitHubClient()
