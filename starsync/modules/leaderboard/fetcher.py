"""
Leaderboard feed client.

Fetches the private leaderboard JSON with the session cookie and turns the
`members` mapping into a LeaderboardSnapshot. Every failure mode surfaces as
UpstreamFetchFailure so the reconciler has one thing to catch.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Mapping, Optional

import aiohttp

from starsync.core.config.config import Config
from starsync.core.exceptions import UpstreamFetchFailure
from starsync.core.logging.logger import get_logger
from starsync.modules.leaderboard.snapshot import LeaderboardSnapshot

logger = get_logger(__name__)


def parse_members(payload: Any) -> Dict[str, int]:
    """
    Extract `{aoc_id: stars}` from a decoded leaderboard body.

    Raises:
        ValueError: if the body does not look like a leaderboard
    """
    if not isinstance(payload, Mapping):
        raise ValueError("leaderboard body is not an object")
    members = payload.get("members")
    if not isinstance(members, Mapping):
        raise ValueError("leaderboard body has no 'members' object")

    scores: Dict[str, int] = {}
    for key, member in members.items():
        if not isinstance(member, Mapping):
            raise ValueError(f"member {key!r} is not an object")
        member_id = member.get("id", key)
        stars = member.get("stars", 0)
        if isinstance(stars, bool) or not isinstance(stars, int) or stars < 0:
            raise ValueError(f"member {member_id!r} has invalid stars {stars!r}")
        scores[str(member_id)] = stars
    return scores


class LeaderboardFetcher:
    """
    HTTP client for one private leaderboard.

    The aiohttp session is created lazily and reused; call `close()` on
    shutdown. A session may be injected for tests.
    """

    def __init__(
        self,
        url: str,
        session_cookie: str,
        user_agent: str,
        timeout_seconds: float = 30,
        http: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.url = url
        self._headers = {
            "Cookie": f"session={session_cookie}",
            "User-Agent": user_agent,
            "Accept": "application/json",
        }
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._http = http
        self._owns_http = http is None

    @classmethod
    def from_config(cls) -> "LeaderboardFetcher":
        return cls(
            url=Config.leaderboard_url(),
            session_cookie=Config.AOC_SESSION,
            user_agent=Config.USER_AGENT,
            timeout_seconds=Config.HTTP_TIMEOUT_SECONDS,
        )

    def _session(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession()
            self._owns_http = True
        return self._http

    async def fetch(self) -> LeaderboardSnapshot:
        """
        Download and decode the leaderboard.

        Raises:
            UpstreamFetchFailure: on transport errors, timeouts, non-200
                statuses, redirects (expired cookie) or malformed bodies
        """
        start = time.perf_counter()
        try:
            async with self._session().get(
                self.url,
                headers=self._headers,
                timeout=self._timeout,
                allow_redirects=False,
            ) as resp:
                if resp.status != 200:
                    raise UpstreamFetchFailure(
                        self.url, f"HTTP {resp.status}", status=resp.status
                    )
                payload = await resp.json(content_type=None)
        except UpstreamFetchFailure:
            raise
        except asyncio.TimeoutError as exc:
            raise UpstreamFetchFailure(self.url, "request timed out") from exc
        except aiohttp.ClientError as exc:
            raise UpstreamFetchFailure(self.url, f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise UpstreamFetchFailure(self.url, f"invalid JSON: {exc}") from exc

        try:
            scores = parse_members(payload)
        except ValueError as exc:
            raise UpstreamFetchFailure(self.url, str(exc)) from exc

        logger.debug(
            f"Fetched leaderboard with {len(scores)} members",
            extra={
                "members": len(scores),
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return LeaderboardSnapshot(scores)

    async def close(self) -> None:
        if self._owns_http and self._http is not None and not self._http.closed:
            await self._http.close()
        self._http = None
