"""
Transcodificador de imágenes con Pillow.

Descarga la imagen (httpx), la recorta/escala a las dimensiones pedidas y la
guarda en el directorio de assets del sitio. El nombre del asset se deriva de
la URL sin query string: las URLs firmadas de Notion cambian en cada request
pero apuntan al mismo archivo.
"""
from __future__ import annotations

import asyncio
import hashlib
import io
import uuid
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import httpx
from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from notion_ingest.shared.exceptions.ingest import TranscodeError

# Limite de descarga para evitar cargar archivos enormes en memoria
DEFAULT_MAX_BYTES = 25 * 1024 * 1024


def asset_name(source_url: str, width: int, height: int, extension: str = "webp") -> str:
    """Nombre estable del asset para una URL y unas dimensiones."""
    scheme, netloc, path, _, _ = urlsplit(source_url)
    stable_url = urlunsplit((scheme, netloc, path, "", ""))
    digest = hashlib.sha256(f"{stable_url}|{width}x{height}".encode("utf-8")).hexdigest()[:20]
    return f"{digest}-{width}x{height}.{extension}"


class PillowImageTranscoder:
    """
    Implementación por defecto de ImageTranscoder.

    Uso:
        transcoder = PillowImageTranscoder(Path("public/_assets"), url_prefix="/_assets")
        src = await transcoder.transcode(url, 1600, 900)  # "/_assets/<hash>-1600x900.webp"
        await transcoder.aclose()
    """

    def __init__(
        self,
        assets_dir: Path,
        *,
        url_prefix: str = "/_assets",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = 30.0,
        image_format: str = "WEBP",
        quality: int = 82,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self._assets_dir = Path(assets_dir)
        self._url_prefix = url_prefix.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)
        self._format = image_format
        self._extension = image_format.lower()
        self._quality = quality
        self._max_bytes = max_bytes

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def transcode(self, source_url: str, width: int, height: int) -> str:
        name = asset_name(source_url, width, height, self._extension)
        target = self._assets_dir / name

        if target.exists():
            logger.debug(f"Asset ya existe, se reutiliza: {target}")
        else:
            payload = await self._download(source_url)
            # Pillow es bloqueante: se ejecuta en un thread para no frenar el event loop
            await asyncio.to_thread(self._resize_and_save, payload, target, width, height, source_url)
            logger.info(f"Imagen transcodificada: {source_url} -> {target}")

        return f"{self._url_prefix}/{name}"

    async def _download(self, source_url: str) -> bytes:
        """Descarga en streaming; corta apenas se supera max_bytes."""
        too_large = f"imagen supera {self._max_bytes} bytes"
        try:
            async with self._http.stream("GET", source_url) as resp:
                if resp.status_code != 200:
                    raise TranscodeError(source_url, f"descarga respondió {resp.status_code}")

                declared = resp.headers.get("Content-Length")
                if declared is not None and declared.isdigit() and int(declared) > self._max_bytes:
                    raise TranscodeError(source_url, too_large)

                payload = bytearray()
                async for chunk in resp.aiter_bytes():
                    payload.extend(chunk)
                    if len(payload) > self._max_bytes:
                        raise TranscodeError(source_url, too_large)
        except httpx.HTTPError as e:
            raise TranscodeError(source_url, f"error descargando imagen: {e}") from e

        return bytes(payload)

    def _resize_and_save(
        self, payload: bytes, target: Path, width: int, height: int, source_url: str
    ) -> None:
        try:
            with Image.open(io.BytesIO(payload)) as img:
                oriented = ImageOps.exif_transpose(img)
                fitted = ImageOps.fit(
                    oriented.convert("RGB"),
                    (width, height),
                    method=Image.Resampling.LANCZOS,
                )
        except (UnidentifiedImageError, OSError) as e:
            raise TranscodeError(source_url, f"imagen inválida: {e}") from e

        target.parent.mkdir(parents=True, exist_ok=True)
        # Escritura atómica: otro registro puede estar generando el mismo asset
        tmp_path = target.with_name(f"{target.name}.{uuid.uuid4().hex}.tmp")
        fitted.save(tmp_path, format=self._format, quality=self._quality)
        tmp_path.replace(target)
