from __future__ import annotations

from site_answers.core.parser import SoupPage, extract_document

PAGE = """
<html>
  <head><title> Front Desk Hours </title><script>var tracking = 1;</script></head>
  <body>
    <nav>Menu Home</nav>
    <main>
      <h1>Front Desk</h1>
      <h1>Hours</h1>
      <p>We are open
         9am to 5pm.</p>
      <div hidden>secret draft</div>
      <style>.x { color: red; }</style>
      <noscript>enable js</noscript>
    </main>
    <a href="/contact">Contact</a>
    <a href="https://other.org/">Elsewhere</a>
  </body>
</html>
"""


def test_extract_title_section_and_main_text() -> None:
    doc = extract_document("https://example.com/front-desk", SoupPage(PAGE), doc_id=4)
    assert doc.id == 4
    assert doc.url == "https://example.com/front-desk"
    assert doc.title == "Front Desk Hours"
    assert doc.section == "Front Desk • Hours"
    assert doc.text == "Front Desk Hours We are open 9am to 5pm."


def test_non_content_elements_are_dropped() -> None:
    doc = extract_document("https://example.com/x", SoupPage(PAGE))
    for junk in ("tracking", "secret", "color", "enable js", "Menu"):
        assert junk not in doc.text


def test_section_falls_back_to_first_h2_and_text_to_body() -> None:
    html = "<html><head><title>T</title></head><body><h2>First</h2><h2>Second</h2><p>Body   text</p></body></html>"
    doc = extract_document("https://example.com/y", SoupPage(html))
    assert doc.section == "First"
    assert doc.text == "First Second Body text"


def test_section_empty_without_headings() -> None:
    doc = extract_document("https://example.com/z", SoupPage("<html><body><p>Plain</p></body></html>"))
    assert doc.title == ""
    assert doc.section == ""
    assert doc.text == "Plain"


def test_links_are_raw_hrefs() -> None:
    assert SoupPage(PAGE).links() == ["/contact", "https://other.org/"]
