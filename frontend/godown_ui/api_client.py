"""
Async HTTP client for the Godown inventory API.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

# URL API (default localhost, overridable through the environment)
API_URL = os.getenv("API_URL", "http://localhost:8000")


class ApiError(Exception):
    """Failed API call. ``status_code`` is None when no response arrived."""

    def __init__(self, status_code: Optional[int], detail: Any):
        super().__init__(f"HTTP {status_code}: {detail}" if status_code else str(detail))
        self.status_code = status_code
        self.detail = detail


class ApiClient:
    def __init__(
        self,
        base_url: str = API_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = httpx.Timeout(30.0, connect=10.0)
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform an API call and return the decoded JSON body."""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method, endpoint, params=params, json=json, headers=self._headers()
                )
                response.raise_for_status()
                try:
                    return response.json()
                except ValueError:
                    raise ApiError(response.status_code, "Invalid JSON in API response")
        except httpx.TimeoutException:
            raise ApiError(None, f"Timed out connecting to API ({self.base_url})")
        except httpx.ConnectError:
            raise ApiError(None, f"Cannot connect to API ({self.base_url}). Is the server running?")
        except httpx.HTTPStatusError as e:
            try:
                body = e.response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                detail = body.get("detail", "Server error")
            else:
                detail = e.response.text or "Server error"
            raise ApiError(e.response.status_code, detail)
        except httpx.RequestError as e:
            raise ApiError(None, f"Request failed: {e}")

    # --- Users ---

    async def signup(self, name: str, email: str, password: str) -> Dict[str, Any]:
        data = await self.request(
            "POST", "/users", json={"name": name, "email": email, "password": password}
        )
        self.token = data["token"]
        return data["user"]

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self.request(
            "POST", "/users/login", json={"email": email, "password": password}
        )
        self.token = data["token"]
        return data["user"]

    # --- Godowns ---

    async def filtered_tree(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self.request("GET", "/godown/filtered", params=params or None)

    async def list_godowns(self, parent_godown: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"parent_godown": parent_godown} if parent_godown else None
        return await self.request("GET", "/godown/list", params=params)

    async def filter_options(self, **scope: Optional[str]) -> Dict[str, List[str]]:
        params = {key: value for key, value in scope.items() if value}
        return await self.request("GET", "/godown/options", params=params or None)

    # --- Items ---

    async def move_item(self, item_id: str, to_location_id: str) -> Dict[str, Any]:
        return await self.request(
            "POST", "/item/move", json={"itemId": item_id, "toLocationId": to_location_id}
        )
