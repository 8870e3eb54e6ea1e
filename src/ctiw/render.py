"""HTML/CSS generator: converts a parsed Document into a page and a stylesheet."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from ctiw.ast import Document, Element, ErrorNode, Node, Special, has_special, walk

DEFAULT_TITLE = "CTIW Page"

TIME_CLASS = "ctiw-time"

# Element kind -> HTML tag; unmapped tag-shaped kinds pass through verbatim.
ELEMENT_TAGS: dict[str, str] = {
    "title": "h1",
    "text": "p",
    "divide": "div",
    "line": "br",
    "heading": "h2",
    "subheading": "h3",
}

SELF_CLOSING_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Properties emitted as HTML attributes rather than styles.
HTML_ATTRIBUTES = frozenset(
    {
        "id", "class", "href", "src", "alt", "title", "type", "name", "value",
        "placeholder", "disabled", "readonly", "checked", "selected",
        "target", "rel", "download", "data", "role", "aria-label",
        "width", "height",
        "autoplay", "controls", "loop", "muted", "poster",
        "action", "method", "enctype",
        "colspan", "rowspan", "scope",
        "min", "max", "step", "pattern", "required", "maxlength", "minlength",
        "for", "tabindex", "autofocus", "autocomplete",
    }
)  # fmt: skip

# CTIW property names that are not CSS property names.
CSS_PROPERTIES: dict[str, str] = {
    "color": "background-color",
    "in": "text-align",
    "size": "width",
}

PIXEL_PROPERTIES = frozenset(
    {
        "font-size", "width", "height", "margin", "padding", "gap",
        "top", "left", "right", "bottom", "border-radius", "size",
        "margin-top", "margin-bottom", "margin-left", "margin-right",
        "padding-top", "padding-bottom", "padding-left", "padding-right",
        "max-width", "min-width", "max-height", "min-height",
    }
)  # fmt: skip

ALIGNMENTS: dict[str, str] = {
    "left": "left",
    "middle": "center",
    "center": "center",
    "right": "right",
}

OUTLINES: dict[str, str] = {
    "visible": "border: 1px solid black",
    "invisible": "border: none",
}

LANGUAGE_CODES: dict[str, str] = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "chinese": "zh",
    "japanese": "ja",
    "korean": "ko",
    "portuguese": "pt",
    "italian": "it",
    "russian": "ru",
}

_CSS_IDENT_RE = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")
_CSS_ID_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
_HEX_RE = re.compile(r"^[0-9A-Fa-f]{6}$")
_DIGITS_RE = re.compile(r"^\d+$")
_UNSAFE_CSS = frozenset("<>{};\"'\\")

_TIME_SCRIPT = """\
  <script>
    function updateTime() {
      const now = new Date().toLocaleTimeString();
      document.querySelectorAll('.ctiw-time').forEach(el => el.textContent = now);
    }
    updateTime();
    setInterval(updateTime, 1000);
  </script>
"""


def generate_html(doc: Document) -> str:
    """Render a Document to a complete HTML page."""
    meta = doc.metadata
    title = meta.title or DEFAULT_TITLE

    body_rule = "body { font-family: sans-serif; padding: 20px;"
    if meta.font_size is not None:
        body_rule += f" font-size: {_format_number(meta.font_size)}px;"
    body_rule += " }"

    parts: list[str] = ["<!DOCTYPE html>\n"]
    lang = _language_code(meta.language)
    if lang:
        parts.append(f'<html lang="{escape_html(lang)}">\n')
    else:
        parts.append("<html>\n")
    parts.append("<head>\n")
    parts.append('  <meta charset="utf-8">\n')
    parts.append(f"  <title>{escape_html(title)}</title>\n")
    parts.append("  <style>\n")
    parts.append(f"    {body_rule}\n")
    for rule in _css_rules(doc.children):
        parts.append(f"    {rule}\n")
    parts.append("  </style>\n")
    parts.append("</head>\n")
    parts.append("<body>\n")
    for child in doc.children:
        rendered = _render_node(child, 1)
        if rendered:
            parts.append(rendered)
            parts.append("\n")
    if has_special(doc, "time"):
        parts.append(_TIME_SCRIPT)
    parts.append("</body>\n")
    parts.append("</html>\n")

    return "".join(parts)


def generate_css(nodes: Iterable[Node]) -> str:
    """Return the id-selector rules for *nodes* and their descendants.

    Elements without an id carry their styles inline and do not appear here.
    """
    return "\n".join(_css_rules(nodes))


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------


def escape_html(text: str) -> str:
    """Escape text for HTML content and attribute values."""
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        elif ch == '"':
            result.append("&quot;")
        elif ch == "'":
            result.append("&#39;")
        else:
            result.append(ch)
    return "".join(result)


def _comment(text: str) -> str:
    return f"<!-- {escape_html(text).replace('--', '- -')} -->"


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


def _css_rules(nodes: Iterable[Node]) -> list[str]:
    rules: list[str] = []
    for node in _with_descendants(nodes):
        if not isinstance(node, Element):
            continue
        element_id = node.properties.get("id")
        if not element_id or not _CSS_ID_RE.match(element_id):
            continue
        declarations = style_declarations(node.properties)
        if declarations:
            rules.append(f"#{element_id} {{ {'; '.join(declarations)}; }}")
    return rules


def _with_descendants(nodes: Iterable[Node]) -> Iterable[Node]:
    for node in nodes:
        yield node
        yield from walk(node)


def style_declarations(properties: Mapping[str, str]) -> list[str]:
    """Translate element properties into CSS declarations, in authored order."""
    declarations: list[str] = []
    for key, value in properties.items():
        if key in HTML_ATTRIBUTES:
            continue
        if any(ch in _UNSAFE_CSS for ch in value):
            continue

        if key == "outline":
            if value in OUTLINES:
                declarations.append(OUTLINES[value])
            continue

        if key == "in":
            if value in ALIGNMENTS:
                declarations.append(f"text-align: {ALIGNMENTS[value]}")
            continue

        css_name = CSS_PROPERTIES.get(key, key)
        if not value or not _CSS_IDENT_RE.match(css_name):
            continue
        declarations.append(f"{css_name}: {_format_css_value(key, value)}")
    return declarations


def _format_css_value(name: str, value: str) -> str:
    """Add a '#' to hex colors and 'px' to bare numbers where the property expects them."""
    if ("color" in name or name == "background") and _HEX_RE.match(value):
        return f"#{value}"
    if name in PIXEL_PROPERTIES and _DIGITS_RE.match(value):
        return f"{value}px"
    return value


def _inline_style(element: Element) -> str:
    element_id = element.properties.get("id")
    if element_id and _CSS_ID_RE.match(element_id):
        return ""
    declarations = style_declarations(element.properties)
    if not declarations:
        return ""
    return f' style="{escape_html("; ".join(declarations))}"'


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return str(value)


def _language_code(language: str | None) -> str:
    if not language:
        return ""
    return LANGUAGE_CODES.get(language.lower(), language)


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


def _render_node(node: Node, depth: int) -> str:
    pad = "  " * depth
    if isinstance(node, Element):
        return pad + _render_element(node, depth)
    if isinstance(node, Special):
        return pad + _render_special(node)
    if isinstance(node, ErrorNode):
        return pad + _comment(f"error: {node.message}: {node.source_text}")
    # Properties live in the head
    return ""


def _render_special(node: Special) -> str:
    if node.kind == "time":
        return f'<span class="{TIME_CLASS}"></span>'
    return _comment(f"unknown special: {node.kind}")


def _attributes(properties: Mapping[str, str], skip: frozenset[str] = frozenset()) -> str:
    attrs: list[str] = []
    for key, value in properties.items():
        if key in HTML_ATTRIBUTES and key not in skip:
            attrs.append(f'{key}="{escape_html(value)}"')
    return "".join(f" {a}" for a in attrs)


def _render_element(element: Element, depth: int) -> str:
    props = element.properties
    content = escape_html(element.content) if element.content else ""
    style = _inline_style(element)

    if element.kind in ("password", "input"):
        input_type = "password" if element.kind == "password" else "text"
        placeholder = f' placeholder="{content}"' if content else ""
        attrs = _attributes(props, frozenset({"type", "placeholder"}))
        return f'<input type="{input_type}"{attrs}{placeholder}{style}>'

    if element.kind == "img":
        src = element.content or props.get("src", "")
        alt = props.get("alt", "")
        attrs = _attributes(props, frozenset({"src", "alt"}))
        return f'<img src="{escape_html(src)}" alt="{escape_html(alt)}"{attrs}{style}>'

    if element.kind == "link":
        href = props.get("href", "#")
        attrs = _attributes(props, frozenset({"href"}))
        return f'<a href="{escape_html(href)}"{attrs}{style}>{content}</a>'

    tag = ELEMENT_TAGS.get(element.kind, element.kind)
    if not _CSS_IDENT_RE.match(tag):
        return _comment(f"unknown element: {element.kind}")

    attrs = _attributes(props)
    if tag in SELF_CLOSING_TAGS:
        return f"<{tag}{attrs}{style}>"

    children = [r for r in (_render_node(c, depth + 1) for c in element.children) if r]
    if children:
        pad = "  " * depth
        inner = "\n".join(children)
        return f"<{tag}{attrs}{style}>\n{inner}\n{pad}</{tag}>"

    return f"<{tag}{attrs}{style}>{content}</{tag}>"
