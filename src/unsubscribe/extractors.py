"""
Unsubscribe link extraction from message body markup.

Two extractors share the LinkExtractor interface:
- RegexLinkExtractor: a single-pass pattern match over the raw markup
  (the default; a best-effort heuristic, not an HTML parse)
- SoupLinkExtractor: walks anchors with BeautifulSoup

Both return the first qualifying link in document order, or None.
"""

from abc import ABC, abstractmethod
from typing import Optional

from bs4 import BeautifulSoup

from .constants import UNSUBSCRIBE_ANCHOR_PATTERN, UNSUBSCRIBE_KEYWORD
from .exceptions import ConfigurationError
from .types import UnsubscribeLink, coerce_link


class LinkExtractor(ABC):
    """Find the unsubscribe link in a message body."""

    @abstractmethod
    def extract(self, body: Optional[str]) -> Optional[UnsubscribeLink]:
        """
        Return the first unsubscribe link in the body, or None.

        Never raises: a body without a link is a normal outcome.
        """
        pass


class RegexLinkExtractor(LinkExtractor):
    """
    Pattern-based extractor.

    Matches an anchor whose href is double-quoted and whose span (from the
    opening tag to a closing </a> on the same line) contains "unsubscribe"
    in any case. Single-quoted hrefs are not recognized. The lazy match can
    run past an earlier </a> on the same line, so an unrelated anchor that
    precedes an unsubscribe anchor on one line wins.
    """

    def __init__(self):
        self.pattern = UNSUBSCRIBE_ANCHOR_PATTERN

    def extract(self, body: Optional[str]) -> Optional[UnsubscribeLink]:
        if not body:
            return None

        match = self.pattern.search(body)
        if match is None:
            return None

        return coerce_link(match.group(1))


class SoupLinkExtractor(LinkExtractor):
    """
    Parser-based extractor using BeautifulSoup.

    Returns the href of the first anchor (document order) whose text or
    attribute values mention "unsubscribe". Accepts either quote style.
    """

    def __init__(self, parser: str = 'html.parser'):
        self.parser = parser

    def extract(self, body: Optional[str]) -> Optional[UnsubscribeLink]:
        if not body:
            return None

        soup = BeautifulSoup(body, self.parser)
        for a_tag in soup.find_all('a', href=True):
            if not self._mentions_unsubscribe(a_tag):
                continue
            link = coerce_link(a_tag['href'])
            if link:
                return link
        return None

    def _mentions_unsubscribe(self, a_tag) -> bool:
        if UNSUBSCRIBE_KEYWORD in a_tag.get_text().lower():
            return True
        for name, value in a_tag.attrs.items():
            if name == 'href':
                continue
            if isinstance(value, list):
                value = ' '.join(value)
            if UNSUBSCRIBE_KEYWORD in str(value).lower():
                return True
        return False


EXTRACTORS = {
    'regex': RegexLinkExtractor,
    'soup': SoupLinkExtractor,
}


def get_extractor(name: str = 'regex') -> LinkExtractor:
    """Build a link extractor by name ('regex' or 'soup')."""
    try:
        return EXTRACTORS[name]()
    except KeyError:
        raise ConfigurationError(f"Unknown link extractor: {name}",
                                 {"available": ", ".join(sorted(EXTRACTORS))})
