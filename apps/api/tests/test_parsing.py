from notestore_api.parsing import extract_inline_tags, extract_markdown_meta, parse_frontmatter


def test_frontmatter_parses_at_byte_zero() -> None:
    md = "---\ntitle: Hello\ntags: [One, Two]\n---\n\nBody\n"
    fm = parse_frontmatter(md)
    assert fm.error is None
    assert fm.frontmatter["title"] == "Hello"
    assert "Body" in fm.body


def test_frontmatter_ignored_when_not_first_line() -> None:
    md = "\n---\ntitle: Hello\n---\nBody\n"
    fm = parse_frontmatter(md)
    assert fm.frontmatter == {}
    assert fm.error is None


def test_frontmatter_yaml_error_falls_back_to_no_frontmatter() -> None:
    md = "---\ntitle: [oops\n---\nBody\n"
    fm = parse_frontmatter(md)
    assert fm.frontmatter == {}
    assert fm.error == "frontmatter_yaml_error"


def test_inline_tags_ignore_code_and_headings() -> None:
    body = "# Heading\nHello #tag\n```\n#nope\n```\nSee `#code` and #Other.\n"
    assert extract_inline_tags(body) == ["other", "tag"]


def test_meta_prefers_frontmatter_title_and_merges_tags() -> None:
    md = "---\ntitle: From Frontmatter\ndescription: Short\ntags: one, two\n---\n# Heading\n#three\n"
    meta = extract_markdown_meta(md)
    assert meta.title == "From Frontmatter"
    assert meta.description == "Short"
    assert meta.tags == ["one", "three", "two"]


def test_meta_falls_back_to_first_heading() -> None:
    meta = extract_markdown_meta("intro\n\n# Real Title\n\n## Sub\n")
    assert meta.title == "Real Title"
    assert meta.description is None


def test_meta_without_title() -> None:
    meta = extract_markdown_meta("just text")
    assert meta.title is None
    assert meta.tags == []
