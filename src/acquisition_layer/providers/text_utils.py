"""
Transcript text normalisation.

Scraped transcripts carry caption timestamps, sound cues and irregular
whitespace. clean_transcript strips those while keeping paragraph breaks.
"""

import re

TIMESTAMP_REGEX = re.compile(r"^\s*(\[)?\d{1,2}:\d{2}(?::\d{2})?(\])?\s*")
PARAGRAPH_BREAK_REGEX = re.compile(r"\r?\n[ \t]*\r?\n")
MULTISPACE_REGEX = re.compile(r"\s+")

NOISE_LINES = frozenset({
    "[music]",
    "[applause]",
    "(music)",
    "(applause)",
})


def clean_transcript(raw: str) -> str:
    """
    Normalise a raw transcript.

    - Removes a leading timestamp from every line ("0:05", "[01:02:03]")
    - Drops sound-cue lines such as "[Music]" (case-insensitive)
    - Collapses whitespace runs inside a line to one space
    - Drops empty lines; blank-line separated paragraphs stay separated
      by exactly one blank line

    Examples:
        >>> clean_transcript("[00:01] hello   there\\n[Music]\\n0:07 world")
        'hello there\\nworld'
    """
    if not raw:
        return ""

    paragraphs: list[str] = []
    for block in PARAGRAPH_BREAK_REGEX.split(raw):
        lines: list[str] = []
        for line in block.splitlines():
            line = TIMESTAMP_REGEX.sub("", line).strip()
            if not line or line.lower() in NOISE_LINES:
                continue
            lines.append(MULTISPACE_REGEX.sub(" ", line))
        if lines:
            paragraphs.append("\n".join(lines))

    return "\n\n".join(paragraphs)
