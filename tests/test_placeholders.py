"""Tests for render-time placeholder resolution."""

import pytest
import yaml

from l2wp.errors import CollaboratorError, MalformedInputError, NotFoundError
from l2wp.providers.meta_provider import MetaFieldProvider
from l2wp.providers.null_provider import NullFieldProvider
from l2wp.render.placeholders import (
    PlaceholderResolver,
    RenderContext,
    YamlContextLoader,
    find_placeholders,
    format_value,
)

POST = RenderContext(
    id="42",
    title="Hello world",
    permalink="https://example.test/hello",
    terms={"category": ["News", "Tech"]},
)


class DictProvider:
    name = "dict"

    def __init__(self, values):
        self.values = values

    def get_field_value(self, field, context_id):
        return self.values.get(context_id, {}).get(field)

    def list_fields(self, content_type):
        return []


class ExplodingProvider:
    name = "exploding"

    def get_field_value(self, field, context_id):
        raise OSError("connection reset")

    def list_fields(self, content_type):
        return []


def _loader(context):
    return lambda context_id: context if context and context.id == context_id else None


def _resolver(providers=None, context=POST):
    return PlaceholderResolver(providers or {}, _loader(context))


class TestFormatValue:
    def test_none(self):
        assert format_value(None) == ""

    def test_list(self):
        assert format_value(["a", 2, None]) == "a, 2, "

    def test_dict(self):
        assert format_value({"url": "x.jpg", "w": 10}) == '{"url":"x.jpg","w":10}'

    def test_bool(self):
        assert format_value(True) == "1"
        assert format_value(False) == ""

    def test_scalars(self):
        assert format_value(19.5) == "19.5"
        assert format_value("text") == "text"


class TestResolve:
    def test_post_attributes(self):
        text = "<h1>{{post.title}}</h1><a href='{{post.permalink}}'>"
        assert _resolver().resolve(text, "42") == "<h1>Hello world</h1><a href='https://example.test/hello'>"

    def test_unknown_post_attribute_left_alone(self):
        assert _resolver().resolve("{{post.secret}}", "42") == "{{post.secret}}"

    def test_taxonomy(self):
        resolver = _resolver()
        assert resolver.resolve("{{taxonomy.category}}", "42") == "News, Tech"
        assert resolver.resolve("[{{taxonomy.tags}}]", "42") == "[]"

    def test_field_namespaces(self):
        provider = DictProvider({"42": {"price": 19.99, "gallery": ["a.jpg", "b.jpg"]}})
        resolver = _resolver({"acf": provider, "jet": NullFieldProvider()})
        text = "{{acf.price}} | {{acf.gallery}} | {{jet.color}}"
        assert resolver.resolve(text, "42") == "19.99 | a.jpg, b.jpg | "

    def test_namespace_without_provider(self):
        assert _resolver().resolve("{{mb.size}}", "42") == "{{mb.size}}"

    def test_unknown_namespace(self):
        assert _resolver().resolve("{{woo.sku}} {{post.title}}", "42") == "{{woo.sku}} Hello world"

    def test_missing_context(self):
        text = "{{post.title}} {{acf.price}}"
        assert _resolver(context=None).resolve(text, "42") == text

    def test_no_tokens_skips_loading(self):
        def loader(context_id):
            raise AssertionError("should not load")

        assert PlaceholderResolver({}, loader).resolve("plain text", "1") == "plain text"

    def test_provider_failure_is_wrapped(self):
        resolver = _resolver({"acf": ExplodingProvider()})
        with pytest.raises(CollaboratorError) as exc_info:
            resolver.resolve("{{acf.price}}", "42")
        assert exc_info.value.context["collaborator"] == "exploding"
        assert "acf.price" in str(exc_info.value)

    def test_provider_lookup_errors_propagate(self, tmp_path):
        path = tmp_path / "fields.yaml"
        path.write_text("contexts: [unclosed\n")
        resolver = _resolver({"acf": MetaFieldProvider(path)})
        with pytest.raises(MalformedInputError):
            resolver.resolve("{{acf.price}}", "42")

    def test_call_sites(self):
        resolver = _resolver()
        assert resolver.render_document("{{post.title}}", "42") == "Hello world"
        assert resolver.render_widget("<b>{{post.title}}</b>", "42") == "<b>Hello world</b>"


class TestFindPlaceholders:
    def test_order_and_duplicates(self):
        text = "{{acf.a}} {{post.title}} {{acf.a}} {{bad}}"
        assert find_placeholders(text) == [("acf", "a"), ("post", "title"), ("acf", "a")]

    def test_empty(self):
        assert find_placeholders("") == []
        assert find_placeholders(None) == []


class TestYamlContextLoader:
    def test_loads_posts(self, tmp_path):
        path = tmp_path / "contexts.yaml"
        path.write_text(yaml.safe_dump({
            "posts": {42: {"title": "Hello", "author": "Ana", "terms": {"category": ["News"]}}},
        }))
        context = YamlContextLoader(path)("42")
        assert context.id == "42"
        assert context.title == "Hello"
        assert context.author == "Ana"
        assert context.excerpt == ""
        assert context.terms == {"category": ["News"]}

    def test_unknown_context(self, tmp_path):
        path = tmp_path / "contexts.yaml"
        path.write_text("posts: {}\n")
        assert YamlContextLoader(path)("1") is None

    def test_missing_file(self, tmp_path):
        assert YamlContextLoader(tmp_path / "nope.yaml")("1") is None

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "contexts.yaml"
        path.write_text("posts: {42: [\n")
        with pytest.raises(MalformedInputError):
            YamlContextLoader(path)("42")


class TestMetaFieldProvider:
    @pytest.fixture
    def provider(self, tmp_path):
        path = tmp_path / "fields.yaml"
        path.write_text(yaml.safe_dump({
            "contexts": {42: {"price": 19.99}},
            "content_types": {"product": [{"name": "price", "label": "Price", "type": "number"}, {"name": "sku"}]},
        }))
        return MetaFieldProvider(path)

    def test_values(self, provider):
        assert provider.get_field_value("price", "42") == 19.99
        assert provider.get_field_value("price", "7") is None
        assert provider.get_field_value("sku", "42") is None

    def test_list_fields(self, provider):
        fields = provider.list_fields("product")
        assert [f.to_dict() for f in fields] == [
            {"name": "price", "label": "Price", "type": "number"},
            {"name": "sku", "label": "sku", "type": "text"},
        ]

    def test_unknown_content_type(self, provider):
        with pytest.raises(NotFoundError, match="Unknown content type 'event'. Available: product"):
            provider.list_fields("event")

    def test_default_path_in_data_dir(self, l2wp_home):
        assert MetaFieldProvider().path == l2wp_home / "fields.yaml"


class TestNullFieldProvider:
    def test_empty(self):
        provider = NullFieldProvider()
        assert provider.get_field_value("price", "42") is None
        assert provider.list_fields("product") == []
