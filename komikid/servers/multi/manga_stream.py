# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

# Manga Stream/MangaThemesia – WordPress Themes for read manga

# Supported servers:
# Kiryuu [ID]
# Komik Cast [ID]
# Komik Station [ID]
# Luvyaa [ID]

from bs4 import BeautifulSoup
import json
import re

from komikid.servers import Server
from komikid.servers.slug_resolver import SlugResolver
from komikid.servers.utils import convert_date_string
from komikid.servers.utils import get_buffer_mime_type
from komikid.servers.utils import get_soup_element_inner_text
from komikid.servers.utils import get_soup_image_url
from komikid.utils import trunc_filename

RANDOM_SLUGS_PREF_KEY = 'pref_auto_random_url'


class MangaStream(Server):
    base_url: str
    manga_url_directory: str = '/manga'

    date_format: str = '%B %d, %Y'
    date_languages: list = None

    # Random slugs
    random_slugs: bool = False
    list_url: str = None  # defaults to `manga_url_directory/list-mode/`
    list_selector: str = 'div#content div.soralist ul li a.series'
    slug_regex: str = r'^(\d+-)'

    # Listing & search
    series_selector: str = '.listupd .bs .bsx a'
    series_name_selector: str = '.tt'
    series_cover_selector: str = 'img'

    # Manga
    name_selector: str = '.entry-title'
    thumbnail_selector: str = '.thumb img'
    name_from_thumbnail_alt: bool = False
    authors_selector: str = '.infox .fmed:-soup-contains("Author") span, .tsinfo .imptdt:-soup-contains("Author") i'
    genres_selector: str = '.infox .mgen a, .seriestugenre a'
    scanlators_selector: str = None
    status_selector: str = '.tsinfo .imptdt:-soup-contains("Status") i'
    synopsis_selector: str = '[itemprop="description"]'

    # Chapters & pages
    chapters_selector: str = '#chapterlist ul li'
    page_selector: str = 'div#readerarea img'

    ignored_chapters_keywords: list = []
    ignored_pages: list = []

    def __init__(self, preferences=None):
        super().__init__(preferences)

        if self.random_slugs:
            self.slug_resolver = SlugResolver(
                self.fetch_page,
                self.preferences,
                self.list_page_url,
                self.list_selector,
                slug_regex=self.slug_regex,
                enabled=lambda: self.preferences.get_boolean(RANDOM_SLUGS_PREF_KEY, True),
            )
        else:
            self.slug_resolver = None

    @property
    def manga_url(self):
        return self.base_url + self.manga_url_directory + '/{0}/'

    @property
    def chapter_url(self):
        # manga slug is not used
        return self.base_url + '/{chapter_slug}/'

    @property
    def manga_list_url(self):
        return self.base_url + self.manga_url_directory + '/'

    @property
    def list_page_url(self):
        """URL of the page listing all series with their current slugs"""
        return self.base_url + (self.list_url or self.manga_url_directory + '/list-mode/')

    @property
    def random_slugs_enabled(self):
        return self.slug_resolver is not None and self.slug_resolver.enabled

    def compute_status(self, label):
        if not label:
            return None

        label = label.strip()

        # Ongoing
        labels = (
            'ongoing',
            'berjalan',  # id
            'on going',
        )
        if any(re.findall('|'.join(labels), label, re.IGNORECASE)):
            return 'ongoing'

        # Complete
        labels = (
            'completed',
            'tamat',  # id
            'selesai',  # id
        )
        if any(re.findall('|'.join(labels), label, re.IGNORECASE)):
            return 'complete'

        # Hiatus
        if re.search('hiatus', label, re.IGNORECASE):
            return 'hiatus'

        # Suspended
        labels = (
            'cancelled',
            'dropped',
        )
        if any(re.findall('|'.join(labels), label, re.IGNORECASE)):
            return 'suspended'

        return None

    def get_cover_url(self, url):
        """Hook allowing servers to rewrite covers URLs"""
        return url

    def get_page_image_url(self, url):
        """Hook allowing servers to rewrite pages images URLs"""
        return url

    def get_manga_data(self, initial_data):
        """
        Returns manga data by scraping manga HTML page content

        Initial data should contain at least manga's slug (provided by search)
        """
        assert 'slug' in initial_data, 'Manga slug is missing in initial data'

        slug = initial_data['slug']
        if self.random_slugs_enabled:
            slug = self.slug_resolver.resolve(self.slug_resolver.to_stable_id(slug))

        r = self.session_get(self.manga_url.format(slug))
        if r.status_code != 200:
            return None

        mime_type = get_buffer_mime_type(r.content)
        if mime_type != 'text/html':
            return None

        soup = BeautifulSoup(r.text, 'html.parser')

        data = initial_data.copy()
        data.update(dict(
            authors=[],
            scanlators=[],
            genres=[],
            status=None,
            synopsis=None,
            chapters=[],
            server_id=self.id,
            cover=None,
        ))

        # Name & cover
        data['name'] = soup.select_one(self.name_selector).text.strip()
        if img_element := soup.select_one(self.thumbnail_selector):
            data['cover'] = self.get_cover_url(get_soup_image_url(img_element))
            if self.name_from_thumbnail_alt and img_element.get('alt', '').strip():
                data['name'] = img_element.get('alt').strip()

        # Details
        if self.authors_selector:
            for element in soup.select(self.authors_selector):
                author = get_soup_element_inner_text(element)
                if author and author != '-' and author not in data['authors']:
                    data['authors'].append(author)
        if self.genres_selector:
            data['genres'] = [element.text.strip() for element in soup.select(self.genres_selector)]
        if self.scanlators_selector:
            data['scanlators'] = [get_soup_element_inner_text(element) for element in soup.select(self.scanlators_selector)]
        if self.status_selector:
            if element := soup.select_one(self.status_selector):
                data['status'] = self.compute_status(get_soup_element_inner_text(element))
        if self.synopsis_selector:
            if element := soup.select_one(self.synopsis_selector):
                data['synopsis'] = element.text.strip()

        # Chapters
        data['chapters'] = self.get_manga_chapters_data(soup)

        return data

    def get_manga_chapters_data(self, soup):
        chapters = []

        for li_element in reversed(soup.select(self.chapters_selector)):
            a_element = li_element.select_one('a')
            if a_element is None or not a_element.get('href'):
                continue

            slug = a_element.get('href').rstrip('/').split('/')[-1]
            if any(keyword in slug for keyword in self.ignored_chapters_keywords):
                continue

            if title_element := li_element.select_one('.chapternum'):
                title = title_element.text.strip().replace('\n', ' ')
            else:
                title = a_element.text.strip()

            if date_element := li_element.select_one('.chapterdate'):
                date = convert_date_string(date_element.text.strip(), format=self.date_format, languages=self.date_languages)
            else:
                date = None

            chapters.append(dict(
                slug=slug,
                title=title,
                date=date,
            ))

        return chapters

    def get_manga_chapter_data(self, manga_slug, manga_name, chapter_slug, chapter_url):
        """
        Returns manga chapter data by scraping chapter HTML page content

        Currently, only pages are expected.
        """
        r = self.session_get(
            self.chapter_url.format(manga_slug=manga_slug, chapter_slug=chapter_slug),
            headers={
                'Referer': self.get_manga_url(manga_slug, None),
            })
        if r.status_code != 200:
            return None

        mime_type = get_buffer_mime_type(r.content)
        if mime_type != 'text/html':
            return None

        soup = BeautifulSoup(r.text, 'html.parser')

        return dict(
            pages=[dict(slug=None, image=image) for image in self.get_manga_chapter_pages_images(soup)],
        )

    def get_manga_chapter_pages_images(self, soup):
        images = []

        for img_element in soup.select(self.page_selector):
            image = get_soup_image_url(img_element)
            if image:
                images.append(image)

        if not images:
            # Pages images are loaded via javascript
            for script_element in soup.find_all('script'):
                script = script_element.string
                if script is None:
                    continue

                for line in script.split('\n'):
                    line = line.strip()
                    if line.startswith('ts_reader.run('):
                        json_data = json.loads(line[14:].rstrip(';').rstrip(')'))
                        for source in json_data['sources']:
                            if source['images']:
                                images = source['images']
                                break

        return [self.get_page_image_url(image) for image in images if not self.is_page_ignored(image)]

    def get_manga_chapter_page_image(self, manga_slug, manga_name, chapter_slug, page):
        """
        Returns chapter page scan (image) content
        """
        headers = {
            'Referer': self.chapter_url.format(manga_slug=manga_slug, chapter_slug=chapter_slug),
        }
        r = self.session_get(page['image'], headers=headers)
        if r.status_code != 200:
            return None

        mime_type = get_buffer_mime_type(r.content)
        if not mime_type.startswith('image'):
            return None

        return dict(
            buffer=r.content,
            mime_type=mime_type,
            name=trunc_filename(page['image'].split('?')[0].split('/')[-1]),
        )

    def get_manga_url(self, slug, url):
        """
        Returns manga absolute URL

        Never blocks on network: last known random slug is used
        """
        if self.random_slugs_enabled:
            slug = self.slug_resolver.resolve_for_display(self.slug_resolver.to_stable_id(slug), allow_stale=True)

        return self.manga_url.format(slug)

    def get_manga_list(self, page=1, **params):
        params['page'] = page
        r = self.session_get(self.manga_list_url, params=params)
        if r.status_code != 200:
            return None

        return self.parse_manga_list(r.text)

    def parse_manga_list(self, html):
        soup = BeautifulSoup(html, 'html.parser')

        results = []
        for a_element in soup.select(self.series_selector):
            if not a_element.get('href'):
                continue

            if name_element := a_element.select_one(self.series_name_selector):
                name = name_element.text.strip()
            else:
                name = a_element.get('title', '').strip()

            results.append(dict(
                slug=self.get_result_slug(a_element.get('href')),
                name=name,
                cover=self.get_cover_url(get_soup_image_url(a_element.select_one(self.series_cover_selector))),
            ))

        return results

    def is_page_ignored(self, url):
        return url.split('?')[0].split('/')[-1] in self.ignored_pages

    def get_result_slug(self, url):
        """Returns the slug stored by the host: the permanent one if random slugs are enabled"""
        if self.random_slugs_enabled:
            return self.slug_resolver.to_stable_id(url)

        return url.rstrip('/').split('/')[-1]

    def get_latest_updates(self):
        return self.get_manga_list(order='update')

    def get_most_populars(self):
        return self.get_manga_list(order='popular')

    def search(self, term, page=1):
        return self.get_manga_list(page=page, title=term, order='')

    def set_base_url_override(self, url):
        url = super().set_base_url_override(url)

        if self.slug_resolver is not None:
            self.slug_resolver.list_url = self.list_page_url
            self.slug_resolver.invalidate()

        return url
