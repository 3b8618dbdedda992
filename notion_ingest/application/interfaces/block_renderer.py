"""
Interfaz del renderer de bloques Notion -> markup.
"""

from __future__ import annotations

from typing import Any, Awaitable, Dict, List, Protocol, Union


class BlockRenderer(Protocol):
    """
    Convierte un árbol de bloques (en orden) a HTML.

    Se aceptan implementaciones síncronas o asíncronas.
    """

    def render(self, blocks: List[Dict[str, Any]]) -> Union[str, Awaitable[str]]:
        ...
