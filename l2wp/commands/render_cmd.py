"""Render command: resolve placeholders for one content item."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from l2wp import ui
from l2wp.builder.nodes import WIDGET, DocumentNode
from l2wp.core.config_service import get_config_service
from l2wp.providers import build_providers
from l2wp.providers.meta_provider import FIELDS_FILE
from l2wp.render.placeholders import PlaceholderResolver, YamlContextLoader


def contexts_path(path: Optional[Path] = None) -> Path:
    """Explicit path, else ``fields.meta_path``, else ``<data_dir>/fields.yaml``."""
    if path:
        return path
    config_svc = get_config_service()
    configured = config_svc.get("fields.meta_path", "")
    return Path(configured).expanduser() if configured else config_svc.get_data_dir() / FIELDS_FILE


def _render_value(resolver: PlaceholderResolver, value: Any, context_id: str) -> Any:
    if isinstance(value, str):
        return resolver.render_widget(value, context_id)
    if isinstance(value, dict):
        return {k: _render_value(resolver, v, context_id) for k, v in value.items()}
    if isinstance(value, list):
        return [_render_value(resolver, v, context_id) for v in value]
    return value


def render_tree(resolver: PlaceholderResolver, content: list[dict], context_id: str) -> list[dict]:
    """Resolve placeholders in every widget's settings, widget by widget."""
    rendered = []
    for data in content:
        root = DocumentNode.from_dict(data)
        for node in root.walk():
            if node.el_type == WIDGET:
                node.settings = _render_value(resolver, node.settings, context_id)
        rendered.append(root.to_dict())
    return rendered


def render_file(file: Path, context_id: str, contexts: Optional[Path] = None) -> None:
    resolver = PlaceholderResolver(build_providers(), YamlContextLoader(contexts_path(contexts)))
    text = file.read_text(encoding="utf-8", errors="replace")

    document = None
    if file.suffix.lower() == ".json":
        try:
            document = json.loads(text)
        except ValueError:
            document = None

    if isinstance(document, dict) and isinstance(document.get("content"), list):
        document["content"] = render_tree(resolver, document["content"], context_id)
        ui.print_json_output(document)
        return
    print(resolver.render_document(text, context_id))
