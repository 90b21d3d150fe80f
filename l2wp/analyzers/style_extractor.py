"""Style extraction from a project's stylesheets.

Pulls color custom properties, font declarations and Tailwind-style
design config out of ``src/index.css`` / ``src/App.css`` and produces a
cleaned stylesheet suitable for a page's custom CSS.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Optional
from urllib.parse import unquote

from .models import ProjectModel

logger = logging.getLogger(__name__)

CUSTOM_PROPERTY_RE = re.compile(r"--([\w-]+):\s*([^;]+);")
ROOT_BLOCK_RE = re.compile(r":root\s*{([^}]+)}")
FONT_IMPORT_RE = re.compile(r"""@import\s+url\(['"]?([^'"()]+)['"]?\);""")
GOOGLE_FAMILY_RE = re.compile(r"family=([^:&]+)")
FONT_FAMILY_RE = re.compile(r"font-family:\s*([^;]+);")
HSL_RE = re.compile(r"(\d+)\s*,?\s*(\d+)%\s*,?\s*(\d+)%")

# Applied in order by clean_css
CLEANUP_PATTERNS = [
    re.compile(r"@tailwind\s+[^;]+;"),
    re.compile(r"@apply\s+[^;]+;"),
    # Only the opening brace goes; the block's closing brace stays behind
    re.compile(r"@layer\s+[\w\s,]+\s*{"),
    re.compile(r"[^{}]+{\s*}"),
]

COLOR_NAME_HINTS = ("color", "background", "foreground", "primary", "secondary", "accent")
GENERIC_FAMILIES = {"sans-serif", "serif", "monospace"}
GOOGLE_FONTS_HOST = "fonts.googleapis.com"


@dataclass
class FontRef:
    name: str
    url: str = ""
    source: str = "custom"  # google | custom


@dataclass
class StyleData:
    """Everything the extractor recovered from one project."""
    colors: dict[str, str] = field(default_factory=dict)
    fonts: list[FontRef] = field(default_factory=list)
    custom_css: str = ""
    tailwind_config: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "colors": dict(self.colors),
            "fonts": [asdict(f) for f in self.fonts],
            "custom_css": self.custom_css,
            "tailwind_config": dict(self.tailwind_config),
        }


# ── Color conversion ──

def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def _to_byte(channel: float) -> int:
    # Round half up, as CSS tooling does
    return int(channel * 255 + 0.5)


def hsl_to_rgb(value: str) -> str:
    """Convert an HSL token (``"142 50% 45%"`` or ``"hsl(142, 50%, 45%)"``)
    to ``#rrggbb``. Hex and ``rgb(...)`` values pass through unchanged;
    anything unparseable becomes ``#000000``.
    """
    if value.startswith("#") or value.startswith("rgb"):
        return value
    match = HSL_RE.search(value)
    if not match:
        return "#000000"

    h = int(match.group(1)) / 360
    s = int(match.group(2)) / 100
    lightness = int(match.group(3)) / 100

    if s == 0:
        r = g = b = lightness
    else:
        q = lightness * (1 + s) if lightness < 0.5 else lightness + s - lightness * s
        p = 2 * lightness - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)

    return "#{:02x}{:02x}{:02x}".format(_to_byte(r), _to_byte(g), _to_byte(b))


def sanitize_key(name: str) -> str:
    """Lower-case and keep only ``[a-z0-9_-]``."""
    return re.sub(r"[^a-z0-9_\-]", "", name.lower())


def humanize(name: str) -> str:
    """``primary-foreground`` -> ``Primary Foreground``."""
    return " ".join(word[:1].upper() + word[1:] for word in name.replace("-", " ").split(" "))


def clean_css(css: str) -> str:
    """Strip Tailwind directives and empty rules from ``css``."""
    for pattern in CLEANUP_PATTERNS:
        css = pattern.sub("", css)
    return css.strip()


class StyleExtractor:
    """Recover design tokens from a ProjectModel's stylesheets.

    The most recent result is kept on the instance so that
    :meth:`get_color_palette` and :meth:`generate_stylesheet` can be
    called without passing it back in.
    """

    def __init__(self):
        self.data = StyleData()

    def extract(self, project: ProjectModel) -> StyleData:
        combined = "".join(f"{sheet.content}\n\n" for sheet in project.assets.css)

        data = StyleData(
            colors=self._extract_colors(combined),
            fonts=self._extract_fonts(combined),
            custom_css=clean_css(combined),
            tailwind_config=self._extract_tailwind_config(project.design_tokens),
        )
        logger.debug("Extracted %d colors and %d fonts", len(data.colors), len(data.fonts))
        self.data = data
        return data

    def _extract_colors(self, css: str) -> dict[str, str]:
        colors: dict[str, str] = {}
        for name, value in CUSTOM_PROPERTY_RE.findall(css):
            if any(hint in name for hint in COLOR_NAME_HINTS):
                colors[name] = value.strip()

        # Everything declared in the first :root block, unfiltered
        root = ROOT_BLOCK_RE.search(css)
        if root:
            for name, value in CUSTOM_PROPERTY_RE.findall(root.group(1)):
                colors[name] = value.strip()
        return colors

    def _extract_fonts(self, css: str) -> list[FontRef]:
        fonts: list[FontRef] = []

        for url in FONT_IMPORT_RE.findall(css):
            if GOOGLE_FONTS_HOST not in url:
                continue
            family = GOOGLE_FAMILY_RE.search(url)
            if family:
                name = unquote(family.group(1)).replace("+", " ")
                fonts.append(FontRef(name=name, url=url, source="google"))

        for declaration in FONT_FAMILY_RE.findall(css):
            first = declaration.strip().strip("'\"").split(",")[0]
            name = first.strip().strip("'\"")
            if not name or name in GENERIC_FAMILIES:
                continue
            if any(font.name == name for font in fonts):
                continue
            fonts.append(FontRef(name=name, source="custom"))
        return fonts

    @staticmethod
    def _extract_tailwind_config(design: dict) -> dict[str, Any]:
        config: dict[str, Any] = {}
        if "colores" in design:
            config["colors"] = design["colores"]
        if "tipografia" in design:
            config["typography"] = design["tipografia"]
        return config

    def get_color_palette(self, data: Optional[StyleData] = None) -> list[dict[str, str]]:
        """Colors as ``{id, label, color}`` entries with hex values."""
        data = data or self.data
        return [
            {"id": sanitize_key(name), "label": humanize(name), "color": hsl_to_rgb(value)}
            for name, value in data.colors.items()
        ]

    def generate_stylesheet(self, data: Optional[StyleData] = None) -> str:
        """A ``:root`` block re-declaring the colors, then the cleaned CSS."""
        data = data or self.data
        css = ""
        if data.colors:
            css += ":root {\n"
            for name, value in data.colors.items():
                css += f"  --{name}: {value};\n"
            css += "}\n\n"
        return css + data.custom_css
