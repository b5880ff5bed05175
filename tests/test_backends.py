"""Tests for html_extract.backends."""

from __future__ import annotations

import pytest

from html_extract.backends import get_backend, list_backends, query
from html_extract.backends.base import NodeKind, SelectorError
from html_extract.backends.css import CssBackend
from html_extract.backends.xpath import XPathBackend

from .conftest import SAMPLE_HTML


class TestRegistry:
    def test_list_backends(self):
        assert list_backends() == ["css", "xpath"]

    def test_get_backend_returns_instances(self):
        assert isinstance(get_backend("xpath"), XPathBackend)
        assert isinstance(get_backend("css"), CssBackend)

    def test_unknown_backend_raises(self):
        with pytest.raises(ValueError, match="Unknown selector type 'jsonpath'"):
            get_backend("jsonpath")

    def test_query_swallows_selector_errors(self):
        assert query(SAMPLE_HTML, "//[", "xpath") == []
        assert query(SAMPLE_HTML, "a[", "css") == []


class TestXPathBackend:
    def test_element_nodes(self):
        nodes = XPathBackend().query(SAMPLE_HTML, "//h1")
        assert len(nodes) == 1
        assert nodes[0].kind is NodeKind.ELEMENT
        assert nodes[0].text_content == "Welcome"
        assert nodes[0].get_attribute("id") == "title"
        assert nodes[0].get_attribute("missing") is None
        assert nodes[0].outer_html == '<h1 id="title">Welcome</h1>'

    def test_text_nodes_serialize_their_parent(self):
        nodes = XPathBackend().query(SAMPLE_HTML, "//h1/text()")
        assert nodes[0].kind is NodeKind.TEXT
        assert nodes[0].value == "Welcome"
        assert nodes[0].outer_html == '<h1 id="title">Welcome</h1>'

    def test_tail_text_serializes_owning_element(self):
        html = "<p>Hello <b>world</b> again</p>"
        nodes = XPathBackend().query(html, "//p/text()")
        assert [n.value for n in nodes] == ["Hello ", " again"]
        assert nodes[1].outer_html == "<p>Hello <b>world</b> again</p>"

    def test_attribute_nodes(self):
        nodes = XPathBackend().query(SAMPLE_HTML, "//div[@class='content']/a/@href")
        assert [n.kind for n in nodes] == [NodeKind.ATTRIBUTE, NodeKind.ATTRIBUTE]
        assert [n.value for n in nodes] == ["/home", "https://example.com/about"]
        assert nodes[0].outer_html.startswith("<a ")

    def test_relative_paths_from_fragment_root(self):
        fragment = '<li class="p"><a href="/a">1</a></li>'
        nodes = XPathBackend().query(fragment, "a/@href")
        assert [n.value for n in nodes] == ["/a"]

    def test_string_result(self):
        nodes = XPathBackend().query(SAMPLE_HTML, "string(//title)")
        assert len(nodes) == 1
        assert nodes[0].value == "Test Page"

    def test_numeric_result_is_not_a_node_set(self):
        assert XPathBackend().query(SAMPLE_HTML, "count(//a)") == []

    def test_invalid_xpath_raises(self):
        with pytest.raises(SelectorError, match="Invalid XPath"):
            XPathBackend().query(SAMPLE_HTML, "//[")

    def test_empty_document_raises(self):
        with pytest.raises(SelectorError, match="Could not parse HTML"):
            XPathBackend().query("", "//a")

    def test_xml_declaration_is_ignored(self):
        html = '<?xml version="1.0" encoding="UTF-8"?>\n<html><body><h1>Hi</h1></body></html>'
        nodes = XPathBackend().query(html, "//h1/text()")
        assert [n.value for n in nodes] == ["Hi"]


class TestCssBackend:
    def test_select_elements(self):
        nodes = CssBackend().query(SAMPLE_HTML, "a.nav")
        assert len(nodes) == 2
        assert nodes[0].text_content == "Home"
        assert nodes[0].get_attribute("href") == "/home"

    def test_multi_valued_attribute_joined(self):
        nodes = CssBackend().query(SAMPLE_HTML, "a.nav")
        assert nodes[0].get_attribute("class") == "nav main"

    def test_outer_html(self):
        nodes = CssBackend().query(SAMPLE_HTML, "h1#title")
        assert nodes[0].outer_html == '<h1 id="title">Welcome</h1>'

    def test_empty_document_has_no_matches(self):
        assert CssBackend().query("", "a") == []

    def test_invalid_selector_raises(self):
        with pytest.raises(SelectorError, match="Invalid CSS selector"):
            CssBackend().query(SAMPLE_HTML, "a[")
