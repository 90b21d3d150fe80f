"""Page component source -> document tree.

This is pattern matching, not parsing. ``<section className=...>``
blocks become sections; inside each, headings, then paragraphs, then
``<Button>`` elements become widgets. When none of those match, the
section's markup is kept as a single raw HTML widget.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from l2wp.analyzers.models import PageFile, ProjectModel
from l2wp.analyzers.style_extractor import StyleData
from l2wp.errors import L2WPError
from l2wp.host.document_store import DocumentStore

from .nodes import DocumentNode, make_column, make_section, make_widget, validate_tree

logger = logging.getLogger(__name__)

SECTION_RE = re.compile(r"""<section[^>]*className=["']([^"']*)["'][^>]*>(.*?)</section>""", re.S)
HEADING_RE = re.compile(r"""<h([1-6])[^>]*className=["']([^"']*)["'][^>]*>(.*?)</h\1>""", re.S)
PARAGRAPH_RE = re.compile(r"""<p[^>]*className=["']([^"']*)["'][^>]*>(.*?)</p>""", re.S)
BUTTON_RE = re.compile(r"<Button[^>]*>(.*?)</Button>", re.S)
TAG_RE = re.compile(r"<[^>]+>")
INTERPOLATION_RE = re.compile(r"\{[^}]+\}")


def strip_tags(markup: str) -> str:
    return TAG_RE.sub("", markup).strip()


def clean_markup(markup: str) -> str:
    """Best-effort JSX to HTML: drop ``{...}`` spans, ``className=`` to
    ``class=``, no self-closing slashes."""
    markup = INTERPOLATION_RE.sub("", markup)
    markup = markup.replace("className=", "class=")
    return markup.replace("/>", ">")


@dataclass
class PageResult:
    """One page written to the document store."""
    page_name: str
    document_id: str
    sections_count: int


class PageTranslator:
    """Translate page component source into section nodes."""

    def split_sections(self, content: str) -> list[tuple[str, str]]:
        """``(classes, inner markup)`` per section; the whole page when none."""
        sections = [(m.group(1), m.group(2)) for m in SECTION_RE.finditer(content)]
        return sections or [("", content)]

    def parse_widgets(self, markup: str) -> list[DocumentNode]:
        widgets = []
        for level, classes, text in HEADING_RE.findall(markup):
            widgets.append(make_widget(
                "heading",
                {"title": strip_tags(text), "header_size": f"h{level}"},
                classes=classes,
            ))
        for classes, text in PARAGRAPH_RE.findall(markup):
            widgets.append(make_widget("text-editor", {"editor": text.strip()}, classes=classes))
        for text in BUTTON_RE.findall(markup):
            widgets.append(make_widget(
                "button",
                {"text": strip_tags(text), "link": {"url": "#"}},
                classes="lovable-button",
            ))
        if not widgets:
            widgets.append(make_widget("html", {"html": clean_markup(markup)}, classes="lovable-html"))
        return widgets

    def translate(self, content: str) -> list[DocumentNode]:
        tree = []
        for classes, inner in self.split_sections(content):
            section = make_section(classes)
            column = section.add(make_column())
            for widget in self.parse_widgets(inner):
                column.add(widget)
            tree.append(section)
        validate_tree(tree)
        return tree

    def translate_page(self, page: PageFile) -> list[DocumentNode]:
        tree = self.translate(page.content)
        logger.debug("Page %s -> %d section(s)", page.name, len(tree))
        return tree


def build_pages(
    project: ProjectModel,
    store: DocumentStore,
    style: Optional[StyleData] = None,
    status: str = "draft",
    translator: Optional[PageTranslator] = None,
    errors: Optional[list[str]] = None,
) -> list[PageResult]:
    """Translate every page and persist one document per page.

    The cleaned stylesheet, when present, becomes each page's custom CSS.
    Store failures propagate, unless an ``errors`` list is passed: then
    each failed page is recorded there and the rest still get built.
    """
    translator = translator or PageTranslator()
    page_settings = {"custom_css": style.custom_css} if style and style.custom_css else None

    results = []
    for page in project.pages:
        tree = translator.translate_page(page)
        try:
            doc_id = store.create_document(
                page.name,
                [node.to_dict() for node in tree],
                "page",
                page_settings=page_settings,
                status=status,
            )
        except L2WPError as e:
            if errors is None:
                raise
            logger.warning("Failed to create page %s: %s", page.name, e)
            errors.append(f"Failed to create page {page.name}: {e}")
            continue
        results.append(PageResult(page_name=page.name, document_id=doc_id, sections_count=len(tree)))
    logger.info("Built %d page(s) for %s", len(results), project.project_name)
    return results
