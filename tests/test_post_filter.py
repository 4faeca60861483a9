"""Tests for selecting post entries."""

import unittest
from datetime import datetime, timezone

from fetchers.post_filter import BLOGGER_KIND_SCHEME, BLOGGER_POST_TERM, PostFilter
from models import FeedEntry, PostCategoryMarker

POST_MARKER = PostCategoryMarker(BLOGGER_KIND_SCHEME, BLOGGER_POST_TERM)


def make_entry(title='A post', categories=(POST_MARKER,)):
    return FeedEntry(
        title=title,
        updated=datetime(2020, 1, 2, tzinfo=timezone.utc),
        content='<p>x</p>',
        authors=('Jane',),
        categories=frozenset(categories),
    )


class TestPostFilter(unittest.TestCase):
    def setUp(self):
        self.post_filter = PostFilter()

    def test_post_with_marker_and_title_is_included(self):
        self.assertTrue(self.post_filter.is_post(make_entry()))

    def test_entry_without_marker_is_excluded(self):
        self.assertFalse(self.post_filter.is_post(make_entry(categories=())))

    def test_other_kind_is_excluded(self):
        comment = PostCategoryMarker(BLOGGER_KIND_SCHEME, 'http://schemas.google.com/blogger/2008/kind#comment')
        self.assertFalse(self.post_filter.is_post(make_entry(categories=(comment,))))

    def test_marker_requires_exact_match(self):
        prefixed = PostCategoryMarker(BLOGGER_KIND_SCHEME, BLOGGER_POST_TERM + 's')
        truncated = PostCategoryMarker(BLOGGER_KIND_SCHEME, BLOGGER_POST_TERM[:-1])
        upper = PostCategoryMarker(BLOGGER_KIND_SCHEME.upper(), BLOGGER_POST_TERM)
        no_scheme = PostCategoryMarker(None, BLOGGER_POST_TERM)

        for marker in (prefixed, truncated, upper, no_scheme):
            self.assertFalse(self.post_filter.is_post(make_entry(categories=(marker,))), marker)

    def test_marker_among_other_categories(self):
        tag = PostCategoryMarker('http://www.blogger.com/atom/ns#', 'travel')
        self.assertTrue(self.post_filter.is_post(make_entry(categories=(tag, POST_MARKER))))

    def test_blank_titles_are_excluded(self):
        for title in ('', '   ', '\n\t'):
            self.assertFalse(self.post_filter.is_post(make_entry(title=title)))

    def test_callable(self):
        self.assertTrue(self.post_filter(make_entry()))

    def test_filter_keeps_order(self):
        entries = [
            make_entry(title='one'),
            make_entry(title='settings', categories=()),
            make_entry(title=''),
            make_entry(title='two'),
        ]

        titles = [entry.title for entry in self.post_filter.filter(entries)]

        self.assertEqual(titles, ['one', 'two'])

    def test_custom_marker(self):
        custom = PostFilter(scheme='urn:kind', term='urn:article')
        entry = make_entry(categories=(PostCategoryMarker('urn:kind', 'urn:article'),))

        self.assertTrue(custom.is_post(entry))
        self.assertFalse(custom.is_post(make_entry()))
