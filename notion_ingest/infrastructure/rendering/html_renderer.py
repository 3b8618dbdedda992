"""
Renderer de bloques Notion -> HTML.

Cubre los bloques habituales de un post (párrafos, títulos, listas, citas,
código, imágenes, separadores, bookmarks). Los bloques no soportados se
emiten como comentario HTML para no perder la posición en el documento.

Todo el texto se escapa con `html.escape`.
"""
from __future__ import annotations

import html
from typing import Any, Dict, List, Optional

_ANNOTATION_TAGS = (
    ("code", "code"),
    ("bold", "strong"),
    ("italic", "em"),
    ("strikethrough", "s"),
    ("underline", "u"),
)

_LIST_TAGS = {
    "bulleted_list_item": "ul",
    "numbered_list_item": "ol",
    "to_do": "ul",
}

_HEADING_TAGS = {
    "heading_1": "h2",
    "heading_2": "h3",
    "heading_3": "h4",
}


def _escape(text: str) -> str:
    return html.escape(text, quote=True)


def render_rich_text(spans: List[Dict[str, Any]]) -> str:
    """Convierte spans de rich text a HTML inline respetando anotaciones."""
    parts: List[str] = []
    for span in spans or []:
        text = span.get("plain_text", "")
        if not text:
            continue

        rendered = _escape(text).replace("\n", "<br>")
        annotations = span.get("annotations") or {}
        for annotation, tag in _ANNOTATION_TAGS:
            if annotations.get(annotation):
                rendered = f"<{tag}>{rendered}</{tag}>"

        href = span.get("href")
        if href:
            rendered = f'<a href="{_escape(href)}">{rendered}</a>'
        parts.append(rendered)
    return "".join(parts)


def _plain_text(spans: List[Dict[str, Any]]) -> str:
    return "".join(span.get("plain_text", "") for span in spans or [])


def _file_url(content: Dict[str, Any]) -> Optional[str]:
    source_type = content.get("type")
    if source_type in ("file", "external"):
        return (content.get(source_type) or {}).get("url")
    return None


class BlockHtmlRenderer:
    """
    Implementación por defecto de BlockRenderer.

    Los items de lista consecutivos del mismo tipo se agrupan en un único
    <ul>/<ol>, igual que en la vista de Notion.
    """

    def render(self, blocks: List[Dict[str, Any]]) -> str:
        out: List[str] = []
        open_list: Optional[str] = None

        for block in blocks:
            block_type = block.get("type", "")
            list_tag = _LIST_TAGS.get(block_type)

            if list_tag != open_list:
                if open_list:
                    out.append(f"</{open_list}>")
                if list_tag:
                    out.append(f"<{list_tag}>")
                open_list = list_tag

            out.append(self._render_block(block))

        if open_list:
            out.append(f"</{open_list}>")
        return "\n".join(part for part in out if part)

    def _render_children(self, content: Dict[str, Any]) -> str:
        children = content.get("children") or []
        return self.render(children) if children else ""

    def _render_block(self, block: Dict[str, Any]) -> str:
        block_type = block.get("type", "")
        content = block.get(block_type) or {}
        text = render_rich_text(content.get("rich_text", []))

        if block_type == "paragraph":
            return f"<p>{text}</p>{self._render_children(content)}" if text else ""

        if block_type in _HEADING_TAGS:
            tag = _HEADING_TAGS[block_type]
            return f"<{tag}>{text}</{tag}>"

        if block_type in ("bulleted_list_item", "numbered_list_item"):
            return f"<li>{text}{self._render_children(content)}</li>"

        if block_type == "to_do":
            checked = " checked" if content.get("checked") else ""
            return (
                f'<li><input type="checkbox" disabled{checked}> '
                f"{text}{self._render_children(content)}</li>"
            )

        if block_type == "quote":
            return f"<blockquote>{text}{self._render_children(content)}</blockquote>"

        if block_type == "callout":
            icon = content.get("icon") or {}
            emoji = _escape(icon.get("emoji", "")) if icon.get("type") == "emoji" else ""
            prefix = f'<span class="callout-icon">{emoji}</span> ' if emoji else ""
            return f'<aside class="callout">{prefix}{text}</aside>'

        if block_type == "toggle":
            return (
                f"<details><summary>{text}</summary>"
                f"{self._render_children(content)}</details>"
            )

        if block_type == "code":
            language = _escape(content.get("language", "plain text"))
            code = _escape(_plain_text(content.get("rich_text", [])))
            return f'<pre><code class="language-{language}">{code}</code></pre>'

        if block_type == "equation":
            return f'<div class="equation">{_escape(content.get("expression", ""))}</div>'

        if block_type == "divider":
            return "<hr>"

        if block_type == "image":
            return self._render_image(content)

        if block_type in ("bookmark", "embed", "video", "file", "pdf"):
            url = content.get("url") or _file_url(content)
            if not url:
                return ""
            caption = _plain_text(content.get("caption", [])) or url
            return f'<p><a href="{_escape(url)}">{_escape(caption)}</a></p>'

        return f"<!-- bloque no soportado: {_escape(block_type)} -->"

    def _render_image(self, content: Dict[str, Any]) -> str:
        url = _file_url(content)
        if not url:
            return ""
        caption_spans = content.get("caption", [])
        alt = _escape(_plain_text(caption_spans))
        figcaption = (
            f"<figcaption>{render_rich_text(caption_spans)}</figcaption>" if caption_spans else ""
        )
        return f'<figure><img src="{_escape(url)}" alt="{alt}" loading="lazy">{figcaption}</figure>'
