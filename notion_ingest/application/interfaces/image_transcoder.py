"""
Interfaz del transcodificador de imágenes (assets externos).
"""

from __future__ import annotations

from typing import Protocol


class ImageTranscoder(Protocol):
    """
    Descarga y redimensiona una imagen remota.

    Puede fallar (red, formato no soportado); quien lo invoca debe capturar
    el error.
    """

    async def transcode(self, source_url: str, width: int, height: int) -> str:
        """Retorna la referencia pública del asset generado."""
        ...
