"""
Provider-specific HTML parsers.

Each parser turns a provider's raw HTML page into plain transcript text.
Parsers never decide whether the result is long enough; the provider
adapter applies the minimum-length rule.
"""

import re

from bs4 import BeautifulSoup
from bs4.element import Tag

WHITESPACE_REGEX = re.compile(r"\s+")


def parse_youtubetotranscript_html(html: str) -> str:
    """
    Extract the transcript from a youtubetotranscript.com page.

    Layout: ``#transcript > p`` blocks hold caption ``<span>`` elements;
    a ``<br>`` ends the current paragraph.

    Returns:
        Paragraphs separated by blank lines, or "" if nothing was found
    """
    soup = BeautifulSoup(html or "", "html.parser")

    paragraphs: list[str] = []
    for block in soup.select("#transcript > p"):
        current: list[str] = []
        for node in block.children:
            if not isinstance(node, Tag):
                continue
            if node.name == "span":
                text = WHITESPACE_REGEX.sub(" ", node.get_text()).strip()
                if text:
                    current.append(text)
            elif node.name == "br":
                if current:
                    paragraphs.append(" ".join(current))
                current = []
        if current:
            paragraphs.append(" ".join(current))

    return "\n\n".join(paragraphs)
