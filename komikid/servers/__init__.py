# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from abc import ABC
from abc import abstractmethod
import logging
import requests
from requests.adapters import TimeoutSauce
from urllib.parse import urlsplit

from komikid.models.preferences import JsonPreferences
from komikid.servers.exceptions import NetworkFailure
from komikid.servers.utils import get_buffer_mime_type
from komikid.servers.utils import get_server_main_id_by_id

# https://www.localeplanet.com/icu/
LANGUAGES = dict(
    en='English',
    id='Bahasa Indonesia',
)

REQUESTS_TIMEOUT = 5

USER_AGENT = 'Mozilla/5.0 (X11; Linux x86_64; rv:120.0) Gecko/20100101 Firefox/120.0'

logger = logging.getLogger('komikid.servers')


class CustomTimeout(TimeoutSauce):
    def __init__(self, *args, **kwargs):
        if kwargs['connect'] is None:
            kwargs['connect'] = REQUESTS_TIMEOUT
        if kwargs['read'] is None:
            kwargs['read'] = REQUESTS_TIMEOUT * 3
        super().__init__(*args, **kwargs)


# Set requests timeout globally, instead of specifying ``timeout=..`` kwarg on each call
requests.adapters.TimeoutSauce = CustomTimeout


class Server(ABC):
    id: str
    name: str
    lang: str

    base_url = None

    headers = None
    is_nsfw = False
    status = 'enabled'

    __sessions = {}  # to cache all existing sessions

    def __init__(self, preferences=None):
        self._preferences = preferences

        # Domain may have been changed by user
        if override := self.preferences.get_string('overrideBaseUrl'):
            self.base_url = override

        if self.session is None:
            self.session = requests.Session()
            self.session.headers.update(self.headers or {'User-Agent': USER_AGENT})

    @classmethod
    def get_manga_initial_data_from_url(cls, url):
        return dict(slug=url.split('?')[0].rstrip('/').split('/')[-1])

    @property
    def preferences(self):
        if self._preferences is None:
            self._preferences = JsonPreferences(get_server_main_id_by_id(self.id))

        return self._preferences

    @property
    def resize_service_url(self):
        """Optional URL prefix of an image resize service (ex: https://wsrv.nl/?url=)"""
        return self.preferences.get_string('resize_service_url') or None

    @property
    def session(self):
        return Server.__sessions.get(self.id)

    @session.setter
    def session(self, value):
        Server.__sessions[self.id] = value

    def fetch_page(self, url):
        """Returns text content of a page

        Raises NetworkFailure if the page can't be retrieved
        """
        try:
            r = self.session_get(url, headers={'Referer': f'{self.base_url}/'})
        except requests.exceptions.RequestException as e:
            raise NetworkFailure(url) from e

        if r.status_code != 200:
            raise NetworkFailure(url, r.status_code)

        return r.text

    def get_manga_cover_image(self, url, etag=None):
        """
        Get a manga cover

        :param str url: The cover image URL
        :param etag: The current cover image ETag
        :type etag: str or None
        :return: The cover image content + the cover image ETag if exists
        :rtype: tuple
        """
        if url is None:
            return None, None

        headers = {
            'Referer': f'{self.base_url}/',
        }
        if etag:
            headers['If-None-Match'] = etag

        r = self.session_get(url, headers=headers)
        if r.status_code != 200:
            return None, None

        buffer = r.content
        mime_type = get_buffer_mime_type(buffer)
        if not mime_type.startswith('image'):
            return None, None

        return buffer, r.headers.get('ETag')

    @abstractmethod
    def get_manga_data(self, initial_data):
        """This method must return a dictionary.

        Data are usually obtained:
        - by scrapping an HTML page
        - or by parsing the response of a request to an API.

        In most cases, the URL of the HTML page or the URL of the API endpoint
        are forged using a slug provided by method `search` and available in `initial_data` argument.

        By convention, returned dict must contain the following keys:
        - name: Name of the manga
        - authors: List of authors (str) [optional]
        - scanlators: List of scanlators (str) [optional]
        - genres: List of genres (str) [optional]
        - status: Status of the manga (ongoing, complete, suspended, hiatus or None) [optional]
        - synopsis: Synopsis of the manga [optional]
        - chapters: List of chapters (See description below)
        - server_id: The server ID
        - cover: Absolute URL of the cover

        By convention, a chapter is a dictionary which must contain the following keys:
        - slug: A slug (str) allowing to forge HTML page URL of the chapter
                (usually in conjunction with the manga slug)
        - url: URL of chapter HTML page if `slug` is not usable
        - title: Title of the chapter
        - date: Publish date of the chapter [optional]
        - scanlators: List of scanlators (str) [optional]
        """

    @abstractmethod
    def get_manga_chapter_data(self, manga_slug, manga_name, chapter_slug, chapter_url):
        """This method must return a list of pages.

        By convention, each page is a dictionary which must contain one of the 3 keys `slug`, `image` or `url`:
        - slug : A slug (str) allowing to forge image URL of the page
        - image: Absolute or relative URL of the page image
        - url: URL of the HTML page to scrape to get the URL of the page image

        The page data are passed to `get_manga_chapter_page_image` method.
        """

    @abstractmethod
    def get_manga_chapter_page_image(self, manga_slug, manga_name, chapter_slug, page):
        """This method must return a dictionary with the following keys:

        - buffer: Image buffer
        - mime_type: Image MIME type
        - name: Filename of the image
        """

    @abstractmethod
    def get_manga_url(self, slug, url):
        """This method must return absolute URL of the manga"""

    @abstractmethod
    def search(self, term=None):
        """This method must return a list of dictionaries.

        By convention, each dict must contain the following keys:
        - slug: A slug (str) allowing to forge URL of the HTML page of the manga
        - url: URL of manga HTML page if `slug` is not usable
        - name: Name of the manga
        - cover: Absolute URL of the manga cover [optional but recommanded]

        The data are passed to `get_manga_data` method.
        """

    def session_get(self, *args, **kwargs):
        try:
            r = self.session.get(*args, **kwargs)
        except Exception as error:
            logger.debug(error)
            raise

        return r

    def session_post(self, *args, **kwargs):
        try:
            r = self.session.post(*args, **kwargs)
        except Exception as error:
            logger.debug(error)
            raise

        return r

    def set_base_url_override(self, url):
        """Changes server domain, an empty value restores the original one"""
        url = (url or '').strip()

        if not url:
            self.preferences.remove('overrideBaseUrl')
            self.base_url = type(self).base_url
            return self.base_url

        if not url.startswith(('http://', 'https://')):
            url = f'https://{url}'

        parts = urlsplit(url)
        if not parts.netloc or ' ' in parts.netloc:
            raise ValueError(f'Invalid URL: {url}')

        url = url.rstrip('/')
        self.preferences.set_string('overrideBaseUrl', url)
        self.base_url = url

        return url
