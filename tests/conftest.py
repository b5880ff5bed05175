"""Shared fixtures for html-extract tests."""

from __future__ import annotations

import pytest

from html_extract.extractor import HtmlParser


@pytest.fixture()
def parser() -> HtmlParser:
    return HtmlParser()


SAMPLE_HTML = """\
<!DOCTYPE html>
<html>
<head>
    <title>Test Page</title>
</head>
<body>
    <div class="content">
        <h1 id="title">Welcome</h1>
        <p class="intro">  Hello <b>world</b>  </p>
        <a href="/home" class="nav main">Home</a>
        <a href="https://example.com/about" class="nav">About</a>
        <img src="/a.jpg" data-id="1"><img src="/b.jpg" data-id="2"><img src="/c.jpg" data-id="3">
    </div>
    <ul id="products">
        <li class="product"><h3>Product A</h3><span class="price">$19.99</span><a href="/p/a">View</a></li>
        <li class="product"><h3>Product B</h3><span class="price">$29.99</span><a href="/p/b">View</a></li>
    </ul>
</body>
</html>
"""

PAGINATION_HTML = """\
<div class="pageNav">
    <ul class="pageNav-main">
        <li class="pageNav-page"><a href="/forum/page-1">1</a></li>
        <li class="pageNav-page pageNav-page--current"><a href="/forum/page-2">2</a></li>
        <li class="pageNav-page pageNav-page--skip"><a href="">…</a></li>
        <li class="pageNav-page pageNav-page--skip"><span>…</span></li>
        <li class="pageNav-page"><a href="https://mirror.example.com/forum/page-9">9</a></li>
    </ul>
</div>
"""
