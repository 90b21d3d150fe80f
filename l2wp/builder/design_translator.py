"""Structured design JSON -> document tree.

Two input shapes are accepted:

* the Lovable project description, ``{"proyecto": {...}}``, whose
  ``estructura_paginas.paginas[].secciones[]`` become one section each;
* a generic layout, ``{"title", "type", "sections": [...]}``, where
  sections carry columns and columns carry typed widgets.

Placeholders such as ``{{acf.price}}`` are copied through untouched and
resolved at render time.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from l2wp.errors import MalformedInputError
from l2wp.host.document_store import DocumentStore

from .nodes import (
    DocumentNode,
    convert_background,
    make_column,
    make_section,
    make_widget,
    map_widget_type,
    validate_tree,
)

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "0.4"
DEFAULT_TITLE = "Lovable Design"
DEFAULT_PROJECT_TITLE = "Lovable Project"

PLACEHOLDER_RE = re.compile(r"\{\{([a-z]+)\.([a-zA-Z0-9_-]+)\}\}")


@dataclass
class DesignDocument:
    """A translated design, ready to persist or export."""
    title: str
    type: str = "page"
    content: list[DocumentNode] = field(default_factory=list)
    version: str = DOCUMENT_VERSION

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "title": self.title,
            "type": self.type,
            "content": [node.to_dict() for node in self.content],
        }


# ── Widget settings per source type ──

def widget_settings(widget: dict) -> dict[str, Any]:
    """Type-specific settings for a generic-layout widget."""
    kind = widget.get("type")
    settings: dict[str, Any] = {}
    if kind == "heading":
        settings["title"] = widget.get("content", "")
        settings["header_size"] = widget.get("tag", "h2")
        settings["align"] = widget.get("align", "left")
    elif kind in ("text", "paragraph"):
        settings["editor"] = widget.get("content", "")
    elif kind == "image":
        if widget.get("src"):
            settings["image"] = {"url": widget["src"]}
        settings["image_size"] = widget.get("size", "full")
        settings["align"] = widget.get("align", "center")
        settings["caption"] = widget.get("caption", "")
    elif kind == "button":
        settings["text"] = widget.get("text", "Click Here")
        settings["link"] = {"url": widget.get("url", "#")}
        settings["size"] = widget.get("size", "md")
        settings["align"] = widget.get("align", "left")
    elif kind == "icon":
        settings["icon"] = {"value": widget.get("icon", "fas fa-star")}
        settings["view"] = widget.get("view", "default")
    elif kind == "video":
        settings["youtube_url"] = widget.get("url", "")
        settings["video_type"] = widget.get("video_type", "youtube")
    elif kind == "html":
        settings["html"] = widget.get("content", "")
    elif kind == "shortcode":
        settings["shortcode"] = widget.get("content", "")
    elif kind not in ("divider", "spacer") and "content" in widget:
        # Unknown types land in a text editor; keep their text
        settings["editor"] = widget["content"]
    return settings


class DesignTranslator:
    """Translate design JSON (already decoded) into a DesignDocument."""

    def convert(self, design: dict) -> DesignDocument:
        if isinstance(design.get("proyecto"), dict):
            document = self.convert_project(design["proyecto"])
        else:
            document = DesignDocument(
                title=design.get("title") or DEFAULT_TITLE,
                type=design.get("type") or "page",
                content=[self.convert_section(s) for s in design.get("sections") or [] if isinstance(s, dict)],
            )
        validate_tree(document.content)
        return document

    # ── Lovable project description ──

    def convert_project(self, proyecto: dict) -> DesignDocument:
        document = DesignDocument(title=proyecto.get("nombre") or DEFAULT_PROJECT_TITLE)
        paginas = (proyecto.get("estructura_paginas") or {}).get("paginas") or []
        for pagina in paginas:
            for seccion in (pagina or {}).get("secciones") or []:
                if isinstance(seccion, dict):
                    document.content.append(self.convert_seccion(seccion))
        return document

    def convert_seccion(self, seccion: dict) -> DocumentNode:
        """Name heading, body text, elements, cards, buttons; in that order."""
        section = make_section()
        column = section.add(make_column())

        column.add(make_widget(
            "heading",
            {"title": seccion.get("nombre") or "Section", "header_size": "h2"},
            animation="fadeInUp",
        ))
        if seccion.get("contenido"):
            column.add(make_widget("text-editor", {"editor": seccion["contenido"]}))

        for elemento in seccion.get("elementos") or []:
            widget = self.convert_elemento(elemento)
            if widget is not None:
                column.add(widget)

        for card in seccion.get("cards") or []:
            if isinstance(card, dict):
                column.add(self.convert_card(card))

        for label in seccion.get("botones") or []:
            column.add(make_widget(
                "button",
                {"text": str(label), "link": {"url": "#"}},
                animation="scaleUp",
            ))
        return section

    def convert_elemento(self, elemento: Any) -> Optional[DocumentNode]:
        if isinstance(elemento, str):
            return make_widget("text-editor", {"editor": elemento})
        if isinstance(elemento, dict) and elemento.get("type"):
            return self.convert_widget(elemento)
        return None

    def convert_card(self, card: dict) -> DocumentNode:
        icon = str(card.get("icono") or "").lower()
        return make_widget(
            "icon-box",
            {
                "title_text": card.get("titulo", ""),
                "description_text": card.get("descripcion", ""),
                "icon": {"value": f"fas fa-{icon}"},
            },
            classes="lovable-card",
            animation="fadeInUp",
        )

    # ── Generic layout ──

    def convert_section(self, spec: dict) -> DocumentNode:
        section = make_section(
            spec.get("classes", ""),
            animation=spec.get("animation"),
            layout=spec.get("layout", "boxed"),
            content_width=spec.get("content_width", "boxed"),
            gap=spec.get("gap", "default"),
            height=spec.get("height", "default"),
        )
        background = spec.get("background")
        if isinstance(background, dict):
            section.settings.update(convert_background(background))
        for column_spec in spec.get("columns") or []:
            if isinstance(column_spec, dict):
                section.add(self.convert_column(column_spec))
        return section

    def convert_column(self, spec: dict) -> DocumentNode:
        width = spec.get("width")
        column = make_column(
            spec.get("classes", ""),
            animation=spec.get("animation"),
            size=width if width is not None else 100,
        )
        if width is not None:
            column.settings["_inline_size"] = width
        for widget_spec in spec.get("widgets") or []:
            if isinstance(widget_spec, dict):
                column.add(self.convert_widget(widget_spec))
        return column

    def convert_widget(self, spec: dict) -> DocumentNode:
        return make_widget(
            map_widget_type(spec.get("type")),
            widget_settings(spec),
            classes=spec.get("classes", ""),
            animation=spec.get("animation"),
        )


# ── Entry points ──

def parse_design(text: str, source: str = "design") -> dict:
    """Decode design JSON, reporting the decode-error classification."""
    text = text.strip()
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise MalformedInputError.from_exception(e, source=source) from e
    if not isinstance(data, dict) or not data:
        raise MalformedInputError("syntax", source=source, detail="Invalid design data structure")
    return data


def design_title(design: dict) -> str:
    proyecto = design.get("proyecto")
    if isinstance(proyecto, dict) and proyecto.get("nombre"):
        return proyecto["nombre"]
    return design.get("title") or DEFAULT_TITLE


def export_design(text: str, store: DocumentStore, source: str = "design") -> tuple[str, DesignDocument]:
    """Decode, translate and persist a design as a builder template.

    Returns the new document id and the translated document.
    """
    design = parse_design(text, source=source)
    document = DesignTranslator().convert(design)
    title = design_title(design)
    doc_id = store.create_document(title, [node.to_dict() for node in document.content], document.type)
    logger.info("Exported design '%s' as document %s", title, doc_id)
    return doc_id, document


def export_as_json(document: DesignDocument) -> str:
    return json.dumps(document.to_dict(), indent=4, ensure_ascii=False)


# ── Placeholders in builder terms ──

def placeholder_to_dynamic_tag(token: str) -> str:
    """``{{acf.price}}`` -> the builder's dynamic-tag shortcode.

    Tokens outside the known namespaces come back unchanged.
    """
    match = PLACEHOLDER_RE.search(token)
    if not match:
        return token
    source, name = match.groups()
    if source == "acf":
        return f"""[elementor-tag id="acf" name="acf-field" settings='{{"key":"{name}"}}']"""
    if source == "jet":
        return f"""[elementor-tag id="jet" name="jet-field" settings='{{"field":"{name}"}}']"""
    if source == "mb":
        return f"""[elementor-tag id="metabox" name="metabox-field" settings='{{"key":"{name}"}}']"""
    if source == "post":
        return f'[elementor-tag id="post" name="post-{name}"]'
    if source == "taxonomy":
        return f"""[elementor-tag id="taxonomy" name="taxonomy" settings='{{"taxonomy":"{name}"}}']"""
    return token


def map_placeholder_to_widget(token: str, field_type: str = "text") -> Optional[dict]:
    """Widget config for a lone placeholder, chosen by the field's type."""
    if not PLACEHOLDER_RE.search(token):
        return None
    tag = placeholder_to_dynamic_tag(token)
    if field_type == "image":
        return {"widgetType": "image", "settings": {"dynamic": {"image": tag}}}
    if field_type in ("wysiwyg", "textarea"):
        return {"widgetType": "text-editor", "settings": {"dynamic": {"editor": tag}}}
    if field_type in ("url", "link"):
        return {"widgetType": "button", "settings": {"dynamic": {"link": tag}}}
    return {"widgetType": "text-editor", "settings": {"editor": tag}}
