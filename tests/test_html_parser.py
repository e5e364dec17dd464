# File: tests/test_html_parser.py
from site_harvest.parser.html_parser import parse_html

HTML = """
<html>
  <head><title> Docs </title><script>var p = "<p>nope</p>";</script></head>
  <body>
    <h1>Heading</h1>
    <p>First   paragraph</p>
    <div><p>  </p></div>
    <p>Second <b>bold</b><br>next line</p>
    <h1>Another heading</h1>
    <a href="/rel">rel</a>
    <a href="https://other.com/x">abs</a>
    <a href="page2">sibling</a>
    <a>no href</a>
  </body>
</html>
"""


def test_text_grouped_by_selector_order():
    page = parse_html(HTML, "https://site.com/docs/index.html", ["p", "h1"])
    assert page.text == (
        "First paragraph\n\n"
        "Second bold\nnext line\n\n"
        "Heading\n\n"
        "Another heading"
    )


def test_title_and_links():
    page = parse_html(HTML, "https://site.com/docs/index.html", ["p"])
    assert page.title == "Docs"
    assert page.links == [
        "https://site.com/rel",
        "https://other.com/x",
        "https://site.com/docs/page2",
    ]


def test_no_match_gives_empty_text():
    page = parse_html(HTML, "https://site.com/", ["article"])
    assert page.text == ""


def test_css_selectors_supported():
    page = parse_html('<div class="c"><p>in</p></div><p>out</p>', "https://site.com/", ["div.c p"])
    assert page.text == "in"


def test_base_href_used_for_links():
    html = '<head><base href="https://site.com/root/"></head><body><a href="child">c</a></body>'
    page = parse_html(html, "https://site.com/elsewhere/page", ["p"])
    assert page.links == ["https://site.com/root/child"]


def test_nested_blocks_keep_line_breaks():
    page = parse_html("<div><p>A</p><p>B</p></div>", "https://site.com/", ["div"])
    assert page.text == "A\nB"


def test_list_items_on_own_lines():
    page = parse_html("<ul><li>one</li><li>two <em>2</em></li></ul>", "https://site.com/", ["ul"])
    assert page.text == "one\ntwo 2"
