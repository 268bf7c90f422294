# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

# Random slugs
#
# Some sites periodically reshuffle the slug of their mangas to deter scraping:
# `https://example.com/manga/1234-one-piece/` becomes `.../5678-one-piece/`.
# Their list-mode page always lists all series with their current slug.
#
# A permanent slug (numeric prefix removed) is stored by the host,
# the current (random) slug is resolved when a request must be made.

import json
import logging
import re
import threading
import time
from types import MappingProxyType
from urllib.parse import urljoin
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from komikid.servers.exceptions import DeserializationFailure
from komikid.servers.exceptions import ParseFailure
from komikid.servers.exceptions import ServerException

CACHE_KEY = 'url_map_cache'
LEGACY_KEYS = ('__random_part_cache', 'titles_without_random_part', )
RETRY_DELAY = 60
SLUG_REGEX = r'^(\d+-)'
TTL = 3600

EMPTY_MAPPING = MappingProxyType({})

logger = logging.getLogger(__name__)


def loads_mapping(value):
    """Decodes a persisted mapping, raises DeserializationFailure if corrupt"""
    try:
        data = json.loads(value)
    except ValueError as e:
        raise DeserializationFailure(f'Invalid persisted mapping: {e}') from e

    if not isinstance(data, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
        raise DeserializationFailure('Persisted mapping is not a mapping of strings')

    return MappingProxyType(data)


class CacheEntry:
    """A mapping fetched at a given instant. Never modified once built."""

    __slots__ = ('mapping', 'fetched_at', )

    def __init__(self, mapping, fetched_at):
        self.mapping = MappingProxyType(dict(mapping))
        self.fetched_at = fetched_at

    def __repr__(self):
        return f'<CacheEntry {len(self.mapping)} slugs fetched at {self.fetched_at}>'

    def is_fresh(self, now, ttl):
        return now - self.fetched_at <= ttl


class SlugResolver:
    """Translates permanent slugs to random slugs (and back)

    :param fetch_page: callable returning the text of a page, raises NetworkFailure
    :param preferences: server's Preferences, used to persist the last fetched mapping
    :param list_url: URL of the page listing all series with their current slugs
    :param list_selector: CSS selector of series links in list page
    :param slug_regex: pattern of the prefix removed from a slug to obtain the permanent slug
    :param ttl: maximum age (in seconds) of the mapping
    :param enabled: bool or callable returning a bool, when False slugs are returned unchanged
    """

    def __init__(self, fetch_page, preferences, list_url, list_selector, slug_regex=SLUG_REGEX, ttl=TTL,
                 enabled=True, retry_delay=RETRY_DELAY, clock=time.monotonic, cache_key=CACHE_KEY):
        self.fetch_page = fetch_page
        self.preferences = preferences
        self.list_url = list_url
        self.list_selector = list_selector
        self.slug_regex = re.compile(slug_regex) if isinstance(slug_regex, str) else slug_regex
        self.ttl = ttl
        self.retry_delay = retry_delay
        self.clock = clock
        self.cache_key = cache_key
        self._enabled = enabled

        self._entry = None
        self._failed_at = None
        self._lock = threading.Lock()

        self.clear_legacy_preferences()

    @property
    def enabled(self):
        if callable(self._enabled):
            return bool(self._enabled())

        return bool(self._enabled)

    @property
    def entry(self):
        return self._entry

    def clear_legacy_preferences(self):
        for key in LEGACY_KEYS:
            if self.preferences.contains(key):
                self.preferences.remove(key)

    def fetch_mapping(self):
        """Fetches list page and builds a new mapping {permanent slug: random slug}

        Raises NetworkFailure or ParseFailure. A page without any series gives an empty mapping,
        unless slugs are already known: ParseFailure is raised so that they are kept.
        """
        text = self.fetch_page(self.list_url)

        try:
            soup = BeautifulSoup(text, 'html.parser')
        except ParserRejectedMarkup as e:
            raise ParseFailure(f'Failed to parse {self.list_url}: {e}') from e

        mapping = {}
        for a_element in soup.select(self.list_selector):
            href = a_element.get('href')
            if not href:
                continue

            slug = self.get_last_segment(urljoin(self.list_url, href.strip()))
            if not slug:
                continue

            # Last seen wins
            mapping[self.strip_prefix(slug)] = slug

        if not mapping:
            # Challenge page or markup change
            entry = self._entry
            if (entry is not None and entry.mapping) or self.load_mapping():
                raise ParseFailure(f'No series found in {self.list_url}')

            logger.warning('No series found in %s', self.list_url)

        return mapping

    def get_mapping(self, cached=False):
        """Returns current mapping

        With `cached`, never fetches: in-memory mapping (whatever its age) if any, else persisted mapping.
        """
        if cached:
            entry = self._entry
            if entry is not None and entry.mapping:
                return entry.mapping

            logger.debug('No slugs in memory, using persisted mapping')
            return self.load_mapping()

        return self._get_fresh_mapping()

    def invalidate(self):
        """Drops in-memory mapping, next resolution will fetch a new one"""
        with self._lock:
            self._entry = None
            self._failed_at = None

    def load_mapping(self):
        """Returns persisted mapping, an empty mapping if none or corrupt"""
        try:
            return loads_mapping(self.preferences.get_string(self.cache_key, '{}'))
        except DeserializationFailure as e:
            logger.debug(e.message)
            return EMPTY_MAPPING

    def resolve(self, slug):
        """Returns the random slug of a permanent slug

        May block during a refresh of the mapping. Falls back to `slug` itself when unknown.
        """
        if not self.enabled:
            return slug

        return self._get_fresh_mapping().get(slug, slug)

    def resolve_for_display(self, slug, allow_stale=True):
        """Returns the random slug of a permanent slug, without network access if `allow_stale` is True"""
        if not self.enabled:
            return slug

        if not allow_stale:
            return self.resolve(slug)

        return self.get_mapping(cached=True).get(slug, slug)

    def save_mapping(self, mapping):
        self.preferences.set_string(self.cache_key, json.dumps(dict(mapping), ensure_ascii=False))

    def strip_prefix(self, slug):
        return self.slug_regex.sub('', slug, count=1)

    def to_stable_id(self, slug_or_url):
        """Returns permanent slug of a slug or a manga URL"""
        return self.strip_prefix(self.get_last_segment(slug_or_url.split('#')[0]))

    @staticmethod
    def get_last_segment(url):
        path = urlsplit(url).path if '://' in url else url

        return path.rstrip('/').split('/')[-1]

    def _get_fresh_mapping(self):
        # Fast path, no lock
        entry = self._entry
        if not self._must_refresh(entry):
            return entry.mapping if entry is not None else EMPTY_MAPPING

        with self._lock:
            # Another thread may have refreshed the mapping while we waited for the lock
            entry = self._entry
            if not self._must_refresh(entry):
                return entry.mapping if entry is not None else EMPTY_MAPPING

            try:
                mapping = self.fetch_mapping()
            except ServerException as e:
                logger.warning('Failed to refresh slugs from %s: %s', self.list_url, e.message)
                self._failed_at = self.clock()
                if entry is not None:
                    return entry.mapping

                # Best effort until next refresh
                return EMPTY_MAPPING

            entry = CacheEntry(mapping, self.clock())
            self._entry = entry
            self._failed_at = None
            self.save_mapping(entry.mapping)

            logger.debug('Fetched %d slugs from %s', len(entry.mapping), self.list_url)

            return entry.mapping

    def _must_refresh(self, entry):
        now = self.clock()

        if entry is not None and entry.is_fresh(now, self.ttl):
            return False

        failed_at = self._failed_at
        if failed_at is not None and now - failed_at < self.retry_delay:
            return False

        return True
