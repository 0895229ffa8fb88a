# daily_challenge/client/api_client.py
"""Async HTTP client for the daily challenge REST API."""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from config import Config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Transport failure or non-2xx response from the backend."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ApiClient:
    """
    Thin wrapper over an aiohttp session. One coroutine per route; every
    failure surfaces as ApiError. No retries.

    Use as an async context manager, or pass an existing session in.
    """

    def __init__(
        self,
        base_url: str = Config.API_BASE_URL,
        timeout: float = Config.API_TIMEOUT_SECONDS,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None
        self.token: Optional[str] = None

    async def __aenter__(self):
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, payload: Any = None) -> Any:
        if self.session is None:
            raise ApiError("client session is not open")

        url = f"{self.base_url}{path}"
        try:
            async with self.session.request(
                method, url, json=payload, headers=self._headers()
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise ApiError(
                        f"{method} {path} failed with {response.status}: {body[:200]}",
                        status=response.status,
                    )
                return await response.json()
        except asyncio.TimeoutError as e:
            raise ApiError(f"{method} {path} timed out after {self.timeout}s") from e
        except (aiohttp.ClientError, ValueError) as e:
            raise ApiError(f"{method} {path} failed: {e}") from e

    # ------------------------------
    # Users
    # ------------------------------
    async def create_user(self, name: str) -> Dict[str, Any]:
        user = await self._request("POST", "/api/users", {"name": name})
        self.token = user.pop("token", None)
        return user

    async def get_user(self, user_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/users/{user_id}")

    async def get_user_stats(self, user_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/users/{user_id}/stats")

    async def get_challenges(self, user_id: int) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/api/users/{user_id}/challenges")
        return data if isinstance(data, list) else []

    async def check_badges(self, user_id: int) -> Dict[str, Any]:
        return await self._request("POST", f"/api/users/{user_id}/check-badges")

    async def get_current_theme(self, user_id: int) -> Optional[Dict[str, Any]]:
        return await self._request("GET", f"/api/users/{user_id}/current-theme")

    async def get_weekly_stats(self, user_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/users/{user_id}/weekly-stats")

    async def get_past_challenges(self, user_id: int) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/api/users/{user_id}/past-challenges")
        return data if isinstance(data, list) else []

    async def archive_challenge(self, user_id: int, challenge_id: int) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/api/users/{user_id}/archive-challenge",
            {"challengeId": challenge_id},
        )

    # ------------------------------
    # Challenges / progress
    # ------------------------------
    async def create_challenge(
        self, user_id: int, name: str, duration: int, goals: List[str]
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/challenges",
            {"user_id": user_id, "name": name, "duration": duration, "goals": goals},
        )

    async def get_progress(self, user_id: int, challenge_id: int, date_key: str) -> Any:
        return await self._request(
            "GET", f"/api/progress/{user_id}/{challenge_id}/{date_key}"
        )

    async def save_progress(
        self,
        user_id: int,
        challenge_id: int,
        date_key: str,
        goal_index: int,
        completed: bool,
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/progress",
            {
                "user_id": user_id,
                "challenge_id": challenge_id,
                "date": date_key,
                "goal_index": goal_index,
                "completed": completed,
            },
        )

    # ------------------------------
    # Leaderboard
    # ------------------------------
    async def get_leaderboard(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/api/leaderboard")
        return data if isinstance(data, list) else []
