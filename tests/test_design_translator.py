"""Tests for design JSON -> document tree translation and export."""

import json

import pytest

from l2wp.builder.design_translator import (
    DEFAULT_TITLE,
    DesignTranslator,
    design_title,
    export_as_json,
    export_design,
    map_placeholder_to_widget,
    parse_design,
    placeholder_to_dynamic_tag,
    widget_settings,
)
from l2wp.errors import MalformedInputError
from l2wp.host.document_store import JsonDocumentStore

PROJECT_DESIGN = {
    "proyecto": {
        "nombre": "Cafe Aroma",
        "estructura_paginas": {
            "paginas": [
                {
                    "nombre": "Inicio",
                    "secciones": [
                        {
                            "nombre": "Hero",
                            "contenido": "Fresh coffee every day",
                            "elementos": ["Open 8-18", {"type": "image", "src": "hero.jpg"}, 42],
                            "cards": [{"titulo": "Beans", "descripcion": "Single origin", "icono": "Coffee"}],
                            "botones": ["Order now"],
                        },
                        {"contenido": "No name here"},
                    ],
                }
            ]
        },
    }
}

LAYOUT_DESIGN = {
    "title": "Landing",
    "type": "section",
    "sections": [
        {
            "classes": "hero",
            "animation": "fadeIn",
            "background": {"type": "color", "color": "#222"},
            "columns": [
                {
                    "width": 50,
                    "widgets": [
                        {"type": "heading", "content": "Hello {{acf.tagline}}", "tag": "h1"},
                        {"type": "button", "text": "Buy", "url": "/shop"},
                    ],
                },
                {"widgets": [{"type": "marquee", "content": "Scrolling"}]},
            ],
        }
    ],
}


class TestWidgetSettings:
    def test_heading_defaults(self):
        assert widget_settings({"type": "heading", "content": "Hi"}) == {
            "title": "Hi", "header_size": "h2", "align": "left",
        }

    def test_image(self):
        settings = widget_settings({"type": "image", "src": "a.jpg"})
        assert settings["image"] == {"url": "a.jpg"}
        assert settings["image_size"] == "full"

    def test_button_defaults(self):
        settings = widget_settings({"type": "button"})
        assert settings["text"] == "Click Here"
        assert settings["link"] == {"url": "#"}

    def test_unknown_type_keeps_content(self):
        assert widget_settings({"type": "marquee", "content": "x"}) == {"editor": "x"}

    def test_divider_has_no_settings(self):
        assert widget_settings({"type": "divider", "content": "x"}) == {}


class TestProjectDesign:
    @pytest.fixture
    def document(self):
        return DesignTranslator().convert(PROJECT_DESIGN)

    def test_title_and_sections(self, document):
        assert document.title == "Cafe Aroma"
        assert document.type == "page"
        assert len(document.content) == 2

    def test_section_widgets_in_order(self, document):
        widgets = document.content[0].elements[0].elements
        assert [w.widget_type for w in widgets] == [
            "heading", "text-editor", "text-editor", "image", "icon-box", "button",
        ]

    def test_heading_and_button_animations(self, document):
        widgets = document.content[0].elements[0].elements
        heading, button = widgets[0], widgets[-1]
        assert heading.settings["title"] == "Hero"
        assert heading.settings["_lovable_animation"] == "fadeInUp"
        assert button.settings["text"] == "Order now"
        assert button.settings["_lovable_animation"] == "scaleUp"
        assert button.settings["link"] == {"url": "#"}

    def test_card(self, document):
        card = document.content[0].elements[0].elements[4]
        assert card.settings["title_text"] == "Beans"
        assert card.settings["icon"] == {"value": "fas fa-coffee"}
        assert card.settings["_css_classes"] == "lovable-widget lovable-card lovable-animate"

    def test_unnamed_section(self, document):
        widgets = document.content[1].elements[0].elements
        assert widgets[0].settings["title"] == "Section"
        assert widgets[1].settings["editor"] == "No name here"


class TestLayoutDesign:
    @pytest.fixture
    def document(self):
        return DesignTranslator().convert(LAYOUT_DESIGN)

    def test_title_and_type(self, document):
        assert document.title == "Landing"
        assert document.type == "section"

    def test_section_settings(self, document):
        settings = document.content[0].settings
        assert settings["css_classes"] == "lovable-section hero lovable-animate"
        assert settings["background_background"] == "color"
        assert settings["background_color"] == "#222"
        assert settings["content_width"] == "boxed"

    def test_columns(self, document):
        first, second = document.content[0].elements
        assert first.settings["_column_size"] == 50
        assert first.settings["_inline_size"] == 50
        assert second.settings["_column_size"] == 100
        assert "_inline_size" not in second.settings

    def test_placeholders_are_kept(self, document):
        heading = document.content[0].elements[0].elements[0]
        assert heading.settings["title"] == "Hello {{acf.tagline}}"
        assert heading.settings["header_size"] == "h1"

    def test_unknown_widget_type(self, document):
        widget = document.content[0].elements[1].elements[0]
        assert widget.widget_type == "text-editor"
        assert widget.settings["editor"] == "Scrolling"

    def test_empty_design(self):
        document = DesignTranslator().convert({"sections": []})
        assert document.title == DEFAULT_TITLE
        assert document.content == []


class TestParseAndExport:
    def test_parse_syntax_error(self):
        with pytest.raises(MalformedInputError) as exc_info:
            parse_design('{"title": ', source="bad.json")
        assert exc_info.value.classification == "syntax"
        assert str(exc_info.value) == "Syntax error, malformed JSON in bad.json"

    def test_parse_control_character(self):
        with pytest.raises(MalformedInputError) as exc_info:
            parse_design('{"title": "a\x01b"}')
        assert exc_info.value.classification == "control-character"

    @pytest.mark.parametrize("text", ["[]", "{}", "42"])
    def test_parse_rejects_non_objects(self, text):
        with pytest.raises(MalformedInputError) as exc_info:
            parse_design(text)
        assert exc_info.value.context["detail"] == "Invalid design data structure"

    def test_design_title(self):
        assert design_title(PROJECT_DESIGN) == "Cafe Aroma"
        assert design_title(LAYOUT_DESIGN) == "Landing"
        assert design_title({"sections": []}) == DEFAULT_TITLE

    def test_export_design_persists(self, tmp_path):
        store = JsonDocumentStore(tmp_path)
        doc_id, document = export_design(json.dumps(LAYOUT_DESIGN), store)
        assert doc_id == "1"
        saved = store.get_document(doc_id)
        assert saved["title"] == "Landing"
        assert saved["type"] == "section"
        assert saved["content"] == [node.to_dict() for node in document.content]

    def test_export_as_json(self):
        document = DesignTranslator().convert(LAYOUT_DESIGN)
        data = json.loads(export_as_json(document))
        assert data["version"] == "0.4"
        assert data["title"] == "Landing"
        assert data["content"][0]["elType"] == "section"


class TestPlaceholderTags:
    def test_acf(self):
        assert placeholder_to_dynamic_tag("{{acf.price}}") == (
            """[elementor-tag id="acf" name="acf-field" settings='{"key":"price"}']"""
        )

    def test_post(self):
        assert placeholder_to_dynamic_tag("{{post.title}}") == '[elementor-tag id="post" name="post-title"]'

    def test_metabox_and_taxonomy(self):
        assert 'id="metabox"' in placeholder_to_dynamic_tag("{{mb.color}}")
        assert '"taxonomy":"category"' in placeholder_to_dynamic_tag("{{taxonomy.category}}")

    def test_unknown_namespace_unchanged(self):
        assert placeholder_to_dynamic_tag("{{woo.sku}}") == "{{woo.sku}}"
        assert placeholder_to_dynamic_tag("plain") == "plain"

    def test_widget_by_field_type(self):
        assert map_placeholder_to_widget("{{acf.logo}}", "image")["widgetType"] == "image"
        assert map_placeholder_to_widget("{{acf.bio}}", "wysiwyg")["widgetType"] == "text-editor"
        assert map_placeholder_to_widget("{{acf.site}}", "url")["widgetType"] == "button"
        text = map_placeholder_to_widget("{{jet.name}}")
        assert text["widgetType"] == "text-editor"
        assert text["settings"]["editor"].startswith('[elementor-tag id="jet"')

    def test_not_a_placeholder(self):
        assert map_placeholder_to_widget("hello") is None
