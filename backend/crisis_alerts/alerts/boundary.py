"""Remote dispatch boundary: the single call that sends a crisis alert.

Two transports return the same raw response dict:
- SupabaseDispatchBoundary: the send-crisis-alert Supabase Edge Function
- HttpDispatchBoundary: the self-hosted FastAPI service in api/main.py
"""

import json
from typing import Any, Protocol

import httpx


class DispatchBoundary(Protocol):
    async def dispatch(self, payload: dict[str, Any]) -> dict[str, Any]:
        ...


def _decode(data: Any) -> Any:
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    if isinstance(data, str):
        return json.loads(data) if data.strip() else {}
    return data


class SupabaseDispatchBoundary:
    """Invoke the dispatch Edge Function through the Supabase async client."""

    def __init__(self, supabase_client=None, function_name: str | None = None):
        from crisis_alerts.config import DISPATCH_FUNCTION_NAME

        self._client = supabase_client
        self.function_name = function_name or DISPATCH_FUNCTION_NAME

    async def _get_client(self):
        if self._client is None:
            from crisis_alerts.config import SUPABASE_ANON_KEY, SUPABASE_URL
            from supabase import acreate_client

            if not SUPABASE_URL or not SUPABASE_ANON_KEY:
                raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set for Supabase dispatch")
            self._client = await acreate_client(SUPABASE_URL, SUPABASE_ANON_KEY)
        return self._client

    async def dispatch(self, payload: dict[str, Any]) -> dict[str, Any]:
        client = await self._get_client()
        data = await client.functions.invoke(
            self.function_name,
            invoke_options={"body": payload, "responseType": "json"},
        )
        return _decode(data)


class HttpDispatchBoundary:
    """POST the payload to a self-hosted dispatch service."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        function_name: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        from crisis_alerts.config import DISPATCH_FUNCTION_NAME, DISPATCH_REQUEST_TIMEOUT

        self.url = f"{base_url.rstrip('/')}/functions/v1/{function_name or DISPATCH_FUNCTION_NAME}"
        self.api_key = api_key
        self._http = http_client
        self._timeout = timeout if timeout is not None else DISPATCH_REQUEST_TIMEOUT

    async def dispatch(self, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {"X-API-Key": self.api_key} if self.api_key else {}
        if self._http is not None:
            response = await self._http.post(self.url, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as http:
                response = await http.post(self.url, json=payload, headers=headers)
        if response.is_error:
            raise RuntimeError(_error_message(response) or f"Dispatch service returned HTTP {response.status_code}")
        return _decode(response.content)


def _error_message(response: httpx.Response) -> str | None:
    """Message from an error body: {"error": ...} from the handler, {"detail": ...} from FastAPI."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    if body.get("error"):
        return str(body["error"])
    detail = body.get("detail")
    if isinstance(detail, list):
        # 422 validation errors: [{"loc": [...], "msg": "..."}, ...]
        return "; ".join(item.get("msg", str(item)) if isinstance(item, dict) else str(item) for item in detail) or None
    return str(detail) if detail else None


def build_dispatch_boundary() -> DispatchBoundary:
    """Pick the boundary configured by DISPATCH_BACKEND."""
    from crisis_alerts.config import ALERTS_API_KEY, DISPATCH_API_URL, DISPATCH_BACKEND

    if DISPATCH_BACKEND == "http":
        return HttpDispatchBoundary(DISPATCH_API_URL, api_key=ALERTS_API_KEY or None)
    if DISPATCH_BACKEND == "supabase":
        return SupabaseDispatchBoundary()
    raise ValueError(f"Unknown DISPATCH_BACKEND '{DISPATCH_BACKEND}' (expected 'supabase' or 'http')")
