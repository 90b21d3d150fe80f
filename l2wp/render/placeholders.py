"""Placeholder Resolver.

Substitutes ``{{namespace.field}}`` tokens in rendered output:

* ``post.*``      attributes of the render context (title, permalink, ...)
* ``acf.*``, ``jet.*``, ``mb.*``  values from the namespace's field provider
* ``taxonomy.*``  comma-joined term names attached to the context

Tokens in any other namespace are left as they are.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

import yaml

from l2wp.errors import CollaboratorError, L2WPError, MalformedInputError
from l2wp.providers import FieldProvider

logger = logging.getLogger("l2wp.render")

TOKEN_RE = re.compile(r"\{\{([a-z]+)\.([a-zA-Z0-9_-]+)\}\}")

POST_ATTRIBUTES = ("title", "content", "excerpt", "date", "author", "permalink", "thumbnail")
NAMESPACES = ("post", "acf", "jet", "mb", "taxonomy")


@dataclass
class RenderContext:
    """The content item a document is being rendered for."""

    id: str
    title: str = ""
    content: str = ""
    excerpt: str = ""
    date: str = ""
    author: str = ""
    permalink: str = ""
    thumbnail: str = ""
    terms: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, context_id: str, data: dict) -> "RenderContext":
        values = {name: str(data.get(name) or "") for name in POST_ATTRIBUTES}
        terms = {str(tax): [str(t) for t in names or []] for tax, names in (data.get("terms") or {}).items()}
        return cls(id=str(context_id), terms=terms, **values)


ContextLoader = Callable[[str], Optional[RenderContext]]


def format_value(value: Any) -> str:
    """Provider value as text: lists comma-joined, objects as compact JSON."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


class PlaceholderResolver:
    """Resolve placeholder tokens against one render context at a time."""

    def __init__(self, providers: dict[str, FieldProvider], context_loader: ContextLoader):
        self.providers = providers
        self.context_loader = context_loader

    def resolve(self, text: str, context_id: str) -> str:
        """Substitute every recognised token in ``text``.

        Each namespace is one pass that only touches its own tokens. When
        the context cannot be loaded the text comes back unchanged.
        """
        if not text or "{{" not in text:
            return text
        context = self.context_loader(str(context_id))
        if context is None:
            logger.debug("No render context %s; leaving placeholders", context_id)
            return text

        for namespace in NAMESPACES:
            text = self._resolve_namespace(text, namespace, context)
        return text

    def _resolve_namespace(self, text: str, namespace: str, context: RenderContext) -> str:
        def substitute(match: re.Match) -> str:
            if match.group(1) != namespace:
                return match.group(0)
            value = self._lookup(namespace, match.group(2), context)
            return match.group(0) if value is None else value

        return TOKEN_RE.sub(substitute, text)

    def _lookup(self, namespace: str, name: str, context: RenderContext) -> Optional[str]:
        """Replacement text, or None to keep the token."""
        if namespace == "post":
            if name not in POST_ATTRIBUTES:
                return None
            return getattr(context, name)
        if namespace == "taxonomy":
            return ", ".join(context.terms.get(name, []))

        provider = self.providers.get(namespace)
        if provider is None:
            return None
        try:
            value = provider.get_field_value(name, context.id)
        except L2WPError:
            raise
        except Exception as e:
            raise CollaboratorError(
                f"Field provider '{provider.name}' failed for {namespace}.{name}",
                collaborator=provider.name,
                cause=e,
            ) from e
        return format_value(value)

    # ── Call sites ──

    def render_document(self, text: str, context_id: str) -> str:
        """Resolve placeholders over a whole rendered document body."""
        return self.resolve(text, context_id)

    def render_widget(self, output: str, context_id: str) -> str:
        """Resolve placeholders in one widget's rendered output."""
        return self.resolve(output, context_id)


def find_placeholders(text: str) -> list[tuple[str, str]]:
    """``(namespace, field)`` pairs in order of appearance, duplicates kept."""
    return TOKEN_RE.findall(text or "")


# ── Context sources ──

class YamlContextLoader:
    """Loads render contexts from the ``posts`` table of a YAML file::

        posts:
          42:
            title: Hello
            terms: {category: [News]}
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._posts: Optional[dict[str, dict]] = None

    def _load(self) -> dict[str, dict]:
        if self._posts is None:
            if not self.path.is_file():
                self._posts = {}
            else:
                try:
                    data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
                except yaml.YAMLError as e:
                    raise MalformedInputError("syntax", source=str(self.path), detail=str(e)) from e
                self._posts = {str(k): v or {} for k, v in (data.get("posts") or {}).items()}
        return self._posts

    def __call__(self, context_id: str) -> Optional[RenderContext]:
        data = self._load().get(str(context_id))
        if data is None:
            return None
        return RenderContext.from_dict(context_id, data)
