"""
Restricted markdown for task descriptions.

Supports **bold** / __bold__, *italic* / _italic_, ~~strike~~, `code`,
[text](url) links, "- " list items and line breaks. Input is HTML-escaped
first, so the only markup in the output is what these rules produce.
"""
import html
import re

CODE_CLASS = "px-1 py-0.5 rounded bg-muted text-muted-foreground text-[10px]"
LINK_CLASS = "text-primary underline hover:no-underline"
LIST_CLASS = "list-disc list-inside space-y-1"

_RULES = [
    (re.compile(r"\*\*(.+?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"__(.+?)__"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.+?)\*"), r"<em>\1</em>"),
    (re.compile(r"_(.+?)_"), r"<em>\1</em>"),
    (re.compile(r"~~(.+?)~~"), r"<del>\1</del>"),
    (re.compile(r"`(.+?)`"), rf'<code class="{CODE_CLASS}">\1</code>'),
]

_LINK = re.compile(r"\[(.+?)\]\((.+?)\)")
_SLOT = re.compile("\x00(\\d+)\x00")

_SAFE_SCHEMES = ("http://", "https://", "mailto:", "/", "#")


def _inline(text: str) -> str:
    for pattern, repl in _RULES:
        text = pattern.sub(repl, text)
    return text


def _link(match: "re.Match") -> str:
    text, url = _inline(match.group(1)), match.group(2)
    if not url.lower().startswith(_SAFE_SCHEMES):
        return text
    return f'<a href="{url}" target="_blank" rel="noopener noreferrer" class="{LINK_CLASS}">{text}</a>'


def _blocks(lines):
    """Group consecutive "- " lines into <ul> blocks; yield (is_list, html)."""
    items = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("- "):
            items.append(f"<li>{stripped[2:]}</li>")
            continue
        if items:
            yield True, f'<ul class="{LIST_CLASS}">{"".join(items)}</ul>'
            items = []
        yield False, line
    if items:
        yield True, f'<ul class="{LIST_CLASS}">{"".join(items)}</ul>'


def render_markdown(text: str) -> str:
    if not text:
        return ""
    out = html.escape(text.replace("\x00", ""), quote=True)

    # Links are rendered first and parked in slots so emphasis rules
    # never see their URLs.
    links = []

    def park(match):
        links.append(_link(match))
        return f"\x00{len(links) - 1}\x00"

    out = _LINK.sub(park, out)
    out = _inline(out)
    out = _SLOT.sub(lambda m: links[int(m.group(1))], out)

    rendered = []
    prev_is_list = True
    for is_list, chunk in _blocks(out.split("\n")):
        if rendered and not is_list and not prev_is_list:
            rendered.append("<br>")
        rendered.append(chunk)
        prev_is_list = is_list
    return "".join(rendered)
