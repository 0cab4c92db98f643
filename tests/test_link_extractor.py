"""
Tests for unsubscribe link extraction from message bodies.

Covers the pattern-based extractor (the default) and the BeautifulSoup
alternative behind the same interface.
"""

import pytest

from src.unsubscribe.exceptions import ConfigurationError
from src.unsubscribe.extractors import (
    LinkExtractor, RegexLinkExtractor, SoupLinkExtractor, get_extractor
)


class TestRegexLinkExtractor:
    """Test the single-pass pattern extractor."""

    @pytest.fixture
    def extractor(self):
        return RegexLinkExtractor()

    def test_simple_unsubscribe_anchor(self, extractor):
        body = '<a href="https://x.test/u?id=1">Click to unsubscribe</a>'
        assert extractor.extract(body) == 'https://x.test/u?id=1'

    def test_no_links(self, extractor):
        assert extractor.extract('<p>No links here</p>') is None

    @pytest.mark.parametrize('body', [None, '', '   ', 'Plain text mentioning unsubscribe'])
    def test_empty_or_plain_text_bodies(self, extractor, body):
        assert extractor.extract(body) is None

    def test_case_insensitive_keyword(self, extractor):
        body = '<p><a href="https://news.test/stop">UnSubScribe</a></p>'
        assert extractor.extract(body) == 'https://news.test/stop'

    def test_case_insensitive_tag(self, extractor):
        body = '<A HREF="https://news.test/stop">Unsubscribe</A>'
        assert extractor.extract(body) == 'https://news.test/stop'

    def test_href_is_trimmed(self, extractor):
        body = '<a href="  https://news.test/stop?u=9  ">unsubscribe</a>'
        assert extractor.extract(body) == 'https://news.test/stop?u=9'

    def test_attributes_before_href(self, extractor):
        body = '<a class="footer" target="_blank" href="https://news.test/u">Unsubscribe here</a>'
        assert extractor.extract(body) == 'https://news.test/u'

    def test_attributes_after_href(self, extractor):
        body = '<a href="https://news.test/u" style="color:#999">unsubscribe</a>'
        assert extractor.extract(body) == 'https://news.test/u'

    def test_keyword_in_nested_markup(self, extractor):
        body = '<a href="https://news.test/u"><span>Unsubscribe</span></a>'
        assert extractor.extract(body) == 'https://news.test/u'

    def test_anchor_without_keyword_is_ignored(self, extractor):
        body = '<a href="https://news.test/home">Visit our site</a>'
        assert extractor.extract(body) is None

    def test_anchor_without_href_is_skipped(self, extractor):
        body = '<a name="footer">Unsubscribe</a>'
        assert extractor.extract(body) is None

    def test_single_quoted_href_not_recognized(self, extractor):
        body = "<a href='https://news.test/u'>Unsubscribe</a>"
        assert extractor.extract(body) is None

    def test_empty_href_counts_as_no_link(self, extractor):
        assert extractor.extract('<a href="">Unsubscribe</a>') is None

    def test_first_qualifying_anchor_wins(self, extractor):
        body = (
            '<a href="https://one.test/unsub">Unsubscribe</a>\n'
            '<a href="https://two.test/unsub">unsubscribe from all</a>'
        )
        assert extractor.extract(body) == 'https://one.test/unsub'

    def test_non_qualifying_anchor_on_earlier_line_is_skipped(self, extractor):
        body = (
            '<a href="https://news.test/home">Home</a>\n'
            '<p>Manage your mail:</p>\n'
            '<a href="https://news.test/unsub">Unsubscribe</a>'
        )
        assert extractor.extract(body) == 'https://news.test/unsub'

    def test_anchor_span_must_fit_on_one_line(self, extractor):
        body = '<a href="https://news.test/u">\nUnsubscribe\n</a>'
        assert extractor.extract(body) is None

    def test_earlier_anchor_on_same_line_over_matches(self, extractor):
        """The lazy span can run past an earlier </a> on the same line."""
        body = '<a href="https://news.test/home">Home</a> | <a href="https://news.test/unsub">Unsubscribe</a>'
        assert extractor.extract(body) == 'https://news.test/home'

    def test_malformed_markup_does_not_raise(self, extractor):
        body = '<a href="https://news.test/u" <<< unsubscribe <a href='
        assert extractor.extract(body) is None


class TestSoupLinkExtractor:
    """Test the BeautifulSoup-based extractor."""

    @pytest.fixture
    def extractor(self):
        return SoupLinkExtractor()

    def test_simple_unsubscribe_anchor(self, extractor):
        body = '<a href="https://x.test/u?id=1">Click to unsubscribe</a>'
        assert extractor.extract(body) == 'https://x.test/u?id=1'

    def test_single_quoted_href_recognized(self, extractor):
        body = "<a href='https://news.test/u'>Unsubscribe</a>"
        assert extractor.extract(body) == 'https://news.test/u'

    def test_picks_anchor_with_keyword_not_first_anchor(self, extractor):
        body = '<a href="https://news.test/home">Home</a> | <a href="https://news.test/unsub">Unsubscribe</a>'
        assert extractor.extract(body) == 'https://news.test/unsub'

    def test_keyword_in_attribute(self, extractor):
        body = '<a href="https://news.test/u" title="Unsubscribe from this list">here</a>'
        assert extractor.extract(body) == 'https://news.test/u'

    def test_keyword_only_in_href_is_ignored(self, extractor):
        body = '<a href="https://news.test/unsubscribe">Manage</a>'
        assert extractor.extract(body) is None

    def test_no_links(self, extractor):
        assert extractor.extract('<p>No links here</p>') is None
        assert extractor.extract('') is None


class TestGetExtractor:
    """Test extractor selection by name."""

    def test_default_is_regex(self):
        assert isinstance(get_extractor(), RegexLinkExtractor)

    def test_soup(self):
        extractor = get_extractor('soup')
        assert isinstance(extractor, SoupLinkExtractor)
        assert isinstance(extractor, LinkExtractor)

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError) as exc_info:
            get_extractor('lxml-magic')
        assert 'lxml-magic' in str(exc_info.value)
