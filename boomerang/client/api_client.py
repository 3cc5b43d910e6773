"""
Async HTTP client for the Boomerang API, used by the review flow.
"""
import logging
import os
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("BOOMERANG_API_URL", "http://localhost:8000")
API_TIMEOUT_SECONDS = float(os.getenv("BOOMERANG_API_TIMEOUT", "15"))


class ApiError(Exception):
    """Non-2xx answer or transport failure. `kind` mirrors the server taxonomy."""

    def __init__(self, status_code: Optional[int], kind: str, message: str):
        super().__init__(f"{kind}: {message}")
        self.status_code = status_code
        self.kind = kind
        self.message = message


class TaskApiClient:
    def __init__(
        self,
        token: str,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _request(self, method: str, path: str, **kwargs) -> dict | list:
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            if self._client is not None:
                resp = await self._client.request(
                    method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
                )
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.request(
                        method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
                    )
        except httpx.TimeoutException as e:
            raise ApiError(None, "Timeout", f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            raise ApiError(None, "NetworkError", f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            kind, message = "HTTPError", resp.text
            try:
                body = resp.json()
            except ValueError:
                body = None
            detail = body.get("detail") if isinstance(body, dict) else None
            if isinstance(detail, dict):
                kind = detail.get("error", kind)
                message = detail.get("message", message)
            elif detail:
                message = str(detail)
            logger.warning(f"{method} {path} -> {resp.status_code} {kind}")
            raise ApiError(resp.status_code, kind, message)

        try:
            return resp.json()
        except ValueError as e:
            logger.warning(f"{method} {path} -> {resp.status_code} with a non-JSON body")
            raise ApiError(resp.status_code, "InvalidResponse", f"{method} {path} returned a non-JSON body") from e

    async def submit_capture(self, transcription: str, duration: Optional[float] = None) -> dict:
        return await self._request(
            "POST", "/api/v1/captures", json={"transcription": transcription, "duration": duration}
        )

    async def list_pending(self) -> dict:
        data = await self._request("GET", "/api/v1/tasks/pending")
        if not isinstance(data, dict):
            raise ApiError(200, "InvalidResponse", "Pending tasks response is not an object")
        return data

    async def update_task(self, task_id: str, status: str, **overrides) -> dict:
        payload = {"status": status}
        payload.update({k: v for k, v in overrides.items() if v is not None})
        data = await self._request("PUT", f"/api/v1/tasks/{task_id}", json=payload)
        if not isinstance(data, dict) or "task" not in data:
            raise ApiError(200, "InvalidResponse", f"Update of task {task_id} returned no task")
        return data["task"]

    async def bulk_approve(self, task_ids: list[str]) -> dict:
        return await self._request("POST", "/api/v1/tasks/bulk-approve", json={"taskIds": task_ids})

    async def list_contacts(self) -> list:
        return await self._request("GET", "/api/v1/contacts")

    async def create_contact(self, name: str, phone: Optional[str] = None, email: Optional[str] = None) -> dict:
        return await self._request(
            "POST", "/api/v1/contacts", json={"name": name, "phone": phone, "email": email}
        )
