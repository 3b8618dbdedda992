"""
Cliente mínimo de la API REST de Notion (sin SDK oficial).

Requisitos cubiertos:
- httpx async
- query de database (filtro y orden opacos, pasados tal cual)
- listado paginado de bloques hijos (un request por página)
- rate-limit/backoff (429, 5xx y errores de transporte)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from notion_ingest.shared.exceptions.ingest import NotionApiError


@dataclass(frozen=True)
class NotionCredentials:
    token: str
    notion_version: str = "2022-06-28"


class NotionApiClient:
    """
    Cliente HTTP de Notion. Devuelve los payloads crudos (dict).

    Importante:
    - No valida la forma de las respuestas: eso es trabajo de `schemas.py`.
    - Implementa `NotionGateway`.
    """

    def __init__(
        self,
        credentials: NotionCredentials,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = "https://api.notion.com/v1",
        timeout_s: float = 30.0,
        max_retries: int = 5,
        min_backoff_s: float = 0.5,
        max_backoff_s: float = 20.0,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._max_retries = max_retries
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def __aenter__(self) -> "NotionApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Cierra el cliente HTTP si fue creado por esta instancia."""
        if self._owns_client:
            await self._http.aclose()

    async def query_database(
        self,
        database_id: str,
        *,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        start_cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Ejecuta `POST /databases/{database_id}/query`.

        El filtro y el orden se delegan por completo a Notion.
        """
        body: Dict[str, Any] = {}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts
        if start_cursor:
            body["start_cursor"] = start_cursor
        if page_size:
            body["page_size"] = page_size

        url = f"{self._base_url}/databases/{database_id}/query"
        return await self._request_json("POST", url, json=body)

    async def list_block_children(
        self,
        block_id: str,
        *,
        start_cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Ejecuta `GET /blocks/{block_id}/children` (una sola página)."""
        params: Dict[str, Any] = {}
        if start_cursor:
            params["start_cursor"] = start_cursor
        if page_size:
            params["page_size"] = page_size

        url = f"{self._base_url}/blocks/{block_id}/children"
        return await self._request_json("GET", url, params=params)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._creds.token}",
            "Notion-Version": self._creds.notion_version,
            "Content-Type": "application/json",
        }

    def _backoff_seconds(self, attempt: int, retry_after: Optional[str]) -> float:
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                return self._min_backoff_s
        # Exponencial simple + jitter proporcional
        base = min(self._max_backoff_s, self._min_backoff_s * (2**attempt))
        return base + (0.15 * base)

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Request HTTP con backoff.

        Estrategia:
        - 429: respeta Retry-After si existe, si no exponencial con jitter simple.
        - 5xx y errores de transporte: exponencial con jitter.
        - 4xx (no 429): error inmediato (token, permisos o filtro mal formado).
        """
        for attempt in range(self._max_retries + 1):
            try:
                resp = await self._http.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    headers=self._headers(),
                )
            except httpx.TransportError as e:
                if attempt >= self._max_retries:
                    raise NotionApiError(
                        f"Error de transporte con Notion tras {attempt} reintentos: {e}"
                    ) from e
                sleep_s = self._backoff_seconds(attempt, None)
                logger.warning(f"Notion {method} {url} fallo ({e}); reintentando en {sleep_s:.1f}s")
                await asyncio.sleep(sleep_s)
                continue

            if 200 <= resp.status_code < 300:
                try:
                    return resp.json()
                except ValueError as e:
                    raise NotionApiError(
                        f"Notion devolvió un body no-JSON en {method} {url}",
                        status_code=resp.status_code,
                    ) from e

            # Errores recuperables
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                if attempt >= self._max_retries:
                    raise NotionApiError(
                        f"Notion error {resp.status_code} tras {attempt} reintentos: {resp.text}",
                        status_code=resp.status_code,
                        notion_code=_error_code(resp),
                    )
                sleep_s = self._backoff_seconds(attempt, resp.headers.get("Retry-After"))
                logger.warning(
                    f"Notion respondio {resp.status_code} en {method} {url}; "
                    f"reintento {attempt + 1}/{self._max_retries} en {sleep_s:.1f}s"
                )
                await asyncio.sleep(sleep_s)
                continue

            # Errores no recuperables
            raise NotionApiError(
                f"Notion request falló {resp.status_code}: {_error_message(resp)}",
                status_code=resp.status_code,
                notion_code=_error_code(resp),
            )

        # Inalcanzable: el loop siempre retorna o lanza
        raise NotionApiError(f"Notion request agotó reintentos: {method} {url}")


def _error_payload(resp: httpx.Response) -> Dict[str, Any]:
    try:
        payload = resp.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _error_code(resp: httpx.Response) -> Optional[str]:
    return _error_payload(resp).get("code")


def _error_message(resp: httpx.Response) -> str:
    return _error_payload(resp).get("message") or resp.text
