"""Target document tree: nodes, class assembly, animation and backgrounds.

A page-builder document is a list of sections; each section holds
columns and each column holds widgets. :meth:`DocumentNode.add` refuses
any other nesting, so every tree built through it is well formed.
"""

from __future__ import annotations

import html
import itertools
import secrets
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

SECTION = "section"
COLUMN = "column"
WIDGET = "widget"

# Allowed child kind per container kind
CHILD_KIND = {SECTION: COLUMN, COLUMN: WIDGET}

CLASS_PREFIX = {
    SECTION: "lovable-section",
    COLUMN: "lovable-column",
    WIDGET: "lovable-widget",
}
ANIMATE_CLASS = "lovable-animate"

ANIMATION_SETTING = "_lovable_animation"
ATTRIBUTES_SETTING = "_lovable_attributes"

# Entrance animation used when an animation dict names no type
DEFAULT_ANIMATION = "fadeIn"
DURATIONS = ("fast", "normal", "slow")
MAX_DELAY_MS = 3000

WIDGET_TYPE_MAP = {
    "heading": "heading",
    "text": "text-editor",
    "paragraph": "text-editor",
    "image": "image",
    "button": "button",
    "divider": "divider",
    "spacer": "spacer",
    "icon": "icon",
    "video": "video",
    "html": "html",
    "shortcode": "shortcode",
    "icon-box": "icon-box",
    "image-box": "image-box",
    "star-rating": "star-rating",
    "testimonial": "testimonial",
    "counter": "counter",
    "progress": "progress",
    "accordion": "accordion",
    "tabs": "tabs",
    "toggle": "toggle",
}
DEFAULT_WIDGET_TYPE = "text-editor"

_ID_PREFIX = secrets.token_hex(3)
_id_counter = itertools.count(1)


def new_id() -> str:
    """A node id unique within this process."""
    return f"{_ID_PREFIX}{next(_id_counter):07x}"


def map_widget_type(source_type: Optional[str]) -> str:
    return WIDGET_TYPE_MAP.get(source_type or "", DEFAULT_WIDGET_TYPE)


# ── Animation ──

def _clamp_delay(value: Any) -> Optional[int]:
    try:
        delay = int(value)
    except (TypeError, ValueError):
        return None
    return max(0, min(MAX_DELAY_MS, delay))


def animation_attributes(animation: Union[str, dict, None]) -> dict[str, str]:
    """Data attributes the front-end animation script reads.

    A string is the animation type. A dict may carry ``type``,
    ``delay`` (ms, 0-3000), ``duration`` (fast|normal|slow) and ``once``
    (replay on every re-entry when false; animate once by default).
    """
    if not animation:
        return {}
    if isinstance(animation, str):
        return {"data-lovable-anim": animation}
    if not isinstance(animation, dict):
        return {}

    attrs = {"data-lovable-anim": str(animation.get("type") or DEFAULT_ANIMATION)}
    delay = _clamp_delay(animation.get("delay")) if animation.get("delay") else None
    if delay:
        attrs["data-lovable-delay"] = str(delay)
    duration = animation.get("duration")
    if duration:
        attrs["data-lovable-duration"] = str(duration) if duration in DURATIONS else "normal"
    if "once" in animation:
        attrs["data-lovable-once"] = "true" if animation["once"] not in (False, "false", 0) else "false"
    return attrs


def render_attributes(attrs: dict[str, str]) -> str:
    """``{"data-lovable-anim": "fadeIn"}`` -> ``data-lovable-anim="fadeIn"``."""
    return " ".join(f'{name}="{html.escape(value, quote=True)}"' for name, value in attrs.items())


def css_classes(kind: str, user_classes: str = "", animation: Union[str, dict, None] = None) -> str:
    """Namespace class, then user classes, then the animation trigger class."""
    parts = [CLASS_PREFIX[kind]]
    extra = " ".join((user_classes or "").split())
    if extra:
        parts.append(extra)
    if animation_attributes(animation):
        parts.append(ANIMATE_CLASS)
    return " ".join(parts)


def apply_animation(settings: dict, animation: Union[str, dict, None]) -> None:
    """Record animation metadata as a setting and as render attributes."""
    attrs = animation_attributes(animation)
    if attrs:
        settings[ANIMATION_SETTING] = animation
        settings[ATTRIBUTES_SETTING] = attrs


# ── Backgrounds ──

def convert_background(background: Optional[dict]) -> dict[str, Any]:
    """Background spec (``{"type": "color"|"gradient"|"image", ...}``) to settings."""
    if not background or not background.get("type"):
        return {}
    kind = background["type"]
    settings: dict[str, Any] = {"background_background": kind}
    if kind == "color":
        settings["background_color"] = background.get("color", "#ffffff")
    elif kind == "gradient":
        settings["background_color"] = background.get("color", "#ffffff")
        settings["background_color_b"] = background.get("color_b", "#000000")
        settings["background_gradient_angle"] = background.get("angle", 180)
    elif kind == "image":
        if background.get("image"):
            settings["background_image"] = {"url": background["image"]}
        settings["background_position"] = background.get("position", "center center")
        settings["background_size"] = background.get("size", "cover")
    return settings


# ── Nodes ──

@dataclass
class DocumentNode:
    """One section, column or widget in the target document."""
    el_type: str
    settings: dict[str, Any] = field(default_factory=dict)
    elements: list["DocumentNode"] = field(default_factory=list)
    widget_type: Optional[str] = None
    id: str = field(default_factory=new_id)

    def add(self, child: "DocumentNode") -> "DocumentNode":
        """Append ``child``, enforcing section > column > widget nesting."""
        expected = CHILD_KIND.get(self.el_type)
        if expected is None:
            raise ValueError(f"A {self.el_type} cannot have children")
        if child.el_type != expected:
            raise ValueError(f"A {self.el_type} can only contain {expected}s, not a {child.el_type}")
        self.elements.append(child)
        return child

    def walk(self) -> Iterator["DocumentNode"]:
        yield self
        for child in self.elements:
            yield from child.walk()

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"id": self.id, "elType": self.el_type}
        if self.el_type == WIDGET:
            data["widgetType"] = self.widget_type
        data["settings"] = self.settings
        data["elements"] = [child.to_dict() for child in self.elements]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "DocumentNode":
        node = cls(
            el_type=data["elType"],
            settings=dict(data.get("settings") or {}),
            widget_type=data.get("widgetType"),
            id=data.get("id") or new_id(),
        )
        for child in data.get("elements") or []:
            node.add(cls.from_dict(child))
        return node


def make_section(classes: str = "", animation=None, **settings: Any) -> DocumentNode:
    node_settings = {"layout": "boxed", **settings}
    node_settings["css_classes"] = css_classes(SECTION, classes, animation)
    apply_animation(node_settings, animation)
    return DocumentNode(SECTION, node_settings)


def make_column(classes: str = "", animation=None, size: Any = 100, **settings: Any) -> DocumentNode:
    node_settings = {"_column_size": size, **settings}
    node_settings["css_classes"] = css_classes(COLUMN, classes, animation)
    apply_animation(node_settings, animation)
    return DocumentNode(COLUMN, node_settings)


def make_widget(widget_type: str, settings: Optional[dict] = None, classes: str = "", animation=None) -> DocumentNode:
    node_settings = {"_css_classes": css_classes(WIDGET, classes, animation)}
    apply_animation(node_settings, animation)
    node_settings.update(settings or {})
    return DocumentNode(WIDGET, node_settings, widget_type=widget_type)


def validate_tree(sections: list[DocumentNode]) -> None:
    """Raise ValueError unless ``sections`` is a well formed document."""
    for section in sections:
        if section.el_type != SECTION:
            raise ValueError(f"Top-level node {section.id} is a {section.el_type}, not a section")
        for column in section.elements:
            if column.el_type != COLUMN:
                raise ValueError(f"Section {section.id} contains a {column.el_type}")
            for widget in column.elements:
                if widget.el_type != WIDGET:
                    raise ValueError(f"Column {column.id} contains a {widget.el_type}")
                if widget.elements:
                    raise ValueError(f"Widget {widget.id} has children")
