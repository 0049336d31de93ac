"""Parser for analysis replies.

Grammar of a reply (anything outside the sections is ignored):

    reply     := ... SUMMARY: summary BULLET_POINTS: bullets KEYWORDS: keywords
    summary   := free text up to the first BULLET_POINTS: after it, or end;
                 kept even when blank
    bullets   := lines up to the first KEYWORDS: after it, or end; a line whose
                 first non-blank character is "-" opens a new bullet, other
                 non-blank lines continue the open bullet; at most
                 MAX_BULLET_POINTS are kept
    keywords  := comma-separated tokens up to end of text

Each section is located independently by the first occurrence of its marker,
so a missing or misplaced marker only affects its own field.
"""

import logging

from gitfolio.llm.prompts import BULLET_POINTS_MARKER, KEYWORDS_MARKER, SUMMARY_MARKER
from gitfolio.models.analysis import ParsedAnalysis

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "No summary generated"
MAX_BULLET_POINTS = 3
BULLET_TOKEN = "-"
KEYWORD_SEPARATOR = ","


def _section(text: str, marker: str, terminator: str | None = None) -> str | None:
    """Return the text after `marker` up to `terminator` (or end), None if absent."""
    start = text.find(marker)
    if start < 0:
        return None
    start += len(marker)
    if terminator is not None:
        end = text.find(terminator, start)
        if end >= 0:
            return text[start:end]
    return text[start:]


def _collapse(text: str) -> str:
    return " ".join(text.split())


def parse_bullets(section: str) -> list[str]:
    """Split a bullet section into whitespace-collapsed bullet texts."""
    bullets: list[list[str]] = []
    for line in section.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(BULLET_TOKEN):
            bullets.append([stripped[len(BULLET_TOKEN):]])
        elif bullets:
            bullets[-1].append(stripped)
        else:
            bullets.append([stripped])

    result = [_collapse(" ".join(parts)) for parts in bullets]
    return [bullet for bullet in result if bullet]


def parse_keywords(section: str) -> list[str]:
    """Split a keyword section on commas, dropping empty tokens."""
    tokens = (token.strip() for token in section.split(KEYWORD_SEPARATOR))
    return [token for token in tokens if token]


def parse_analysis_response(raw: str) -> ParsedAnalysis:
    """Parse a generation reply into summary, bullet points and keywords.

    Never raises. A missing marker yields the default for that field only;
    a present but blank summary stays blank.

    Args:
        raw: Reply text

    Returns:
        ParsedAnalysis with every field populated
    """
    text = raw if isinstance(raw, str) else ""
    result = ParsedAnalysis(summary=DEFAULT_SUMMARY)

    summary = _section(text, SUMMARY_MARKER, BULLET_POINTS_MARKER)
    if summary is not None:
        result.summary = summary.strip()

    bullets = _section(text, BULLET_POINTS_MARKER, KEYWORDS_MARKER)
    if bullets is not None:
        points = parse_bullets(bullets)
        if len(points) > MAX_BULLET_POINTS:
            logger.debug(
                "Keeping %d of %d bullet points", MAX_BULLET_POINTS, len(points)
            )
        result.bullet_points = points[:MAX_BULLET_POINTS]

    keywords = _section(text, KEYWORDS_MARKER)
    if keywords is not None:
        result.keywords = parse_keywords(keywords)

    missing = [
        marker
        for marker, section in (
            (SUMMARY_MARKER, summary),
            (BULLET_POINTS_MARKER, bullets),
            (KEYWORDS_MARKER, keywords),
        )
        if section is None
    ]
    if missing:
        logger.debug("Reply is missing section markers: %s", ", ".join(missing))

    return result
