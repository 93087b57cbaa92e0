"""
Footer merge engine.

README files are scanned as HTML documents. The footer lives in a wrapper
element carrying a fixed id; that wrapper is the unit that gets detected,
removed and re-inserted, so running the updater twice never duplicates the
footer.

The parser is only used to find the wrapper. The wrapper is cut out of the
original text by position, and everything around it is kept byte for byte:
markdown is not HTML, and re-serializing a parse tree would rewrite code
samples like ``Map<String, Integer>`` or autolinks like ``<https://...>``.
"""

import logging
import re
from typing import Optional, Tuple

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger("readme-footer.footer")

FOOTER_MARKER_ID = "metatavu-custom-footer"

DEFAULT_FOOTER = (
    '<p align="center">'
    "This repository is maintained by our organization. "
    "Questions and contributions are welcome through issues and pull requests."
    "</p>"
)

# html.parser records the line and column of every start tag and needs no
# compiled dependency.
PARSER = "html.parser"


def _offset(document: str, line: int, column: int) -> int:
    """Turn a 1-based line and 0-based column into a string index."""
    index = 0
    for _ in range(line - 1):
        index = document.index("\n", index) + 1
    return index + column


def _element_end(document: str, start: int, tag: Tag) -> int:
    """Index just past the close tag matching the element opened at ``start``."""
    pattern = re.compile(r"<(/?)%s\b[^>]*>" % re.escape(tag.name), re.IGNORECASE)
    if tag.can_be_empty_element:
        return pattern.match(document, start).end()
    depth = 0
    for match in pattern.finditer(document, start):
        if match.group(1):
            depth -= 1
        elif not match.group(0).endswith("/>"):
            depth += 1
        if depth == 0:
            return match.end()
    # unclosed wrapper: the parser put the rest of the document inside it
    return len(document)


class FooterMerger:
    """
    Detect and replace the marked footer block of a README.

    The merger performs no I/O; callers decide whether an update is needed
    by comparing the returned document with the original.

    Args:
        marker_id: id of the wrapper element that identifies the footer
    """

    def __init__(self, marker_id: str = FOOTER_MARKER_ID) -> None:
        self.marker_id = marker_id

    def _find_marker(self, document: str) -> Optional[Tag]:
        return BeautifulSoup(document, PARSER).find(id=self.marker_id)

    def detect(self, document: str) -> bool:
        """Return True if the document already contains the footer wrapper."""
        return self._find_marker(document) is not None

    def locate(self, document: str) -> Optional[Tuple[int, int]]:
        """Return the ``(start, end)`` span of the footer wrapper, or None."""
        marker = self._find_marker(document)
        if marker is None:
            return None
        start = _offset(document, marker.sourceline, marker.sourcepos)
        return start, _element_end(document, start, marker)

    def wrap(self, footer_html: str) -> str:
        """Build the wrapper element holding ``footer_html``."""
        return f'<div id="{self.marker_id}">{footer_html}</div>'

    def merge(self, document: str, footer_html: str, force_overwrite: bool) -> str:
        """
        Insert or replace the footer.

        Args:
            document: Current README content
            footer_html: Inner HTML of the footer wrapper
            force_overwrite: Replace an existing footer. When False and a
                             footer exists the document is returned as is.

        Returns:
            The updated document
        """
        span = self.locate(document)

        body = document
        if span is not None:
            if not force_overwrite:
                logger.debug("Footer %s exists, leaving document untouched", self.marker_id)
                return document
            start, end = span
            body = document[:start] + document[end:]
            logger.debug("Removed existing footer %s at %d-%d", self.marker_id, start, end)

        if body and not body.endswith("\n"):
            body += "\n"
        return body + self.wrap(footer_html)
