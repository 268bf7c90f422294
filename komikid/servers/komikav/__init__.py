# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from bs4 import BeautifulSoup
import re
from urllib.parse import urlsplit

from komikid.servers import Server
from komikid.servers.utils import convert_date_string
from komikid.servers.utils import get_buffer_mime_type
from komikid.servers.utils import get_soup_image_url

# Abbreviated units used in relative dates (`3 mgg lalu`)
DATE_ABBREVIATIONS = {
    'mnt': 'menit',
    'mgg': 'minggu',
    'bln': 'bulan',
    'thn': 'tahun',
}

GENRES = [
    ('action', 'Action'),
    ('adventure', 'Adventure'),
    ('comedy', 'Comedy'),
    ('drama', 'Drama'),
    ('fantasy', 'Fantasy'),
    ('horror', 'Horror'),
    ('martial-arts', 'Martial Arts'),
    ('romance', 'Romance'),
    ('school', 'School'),
    ('sci-fi', 'Sci-Fi'),
    ('seinen', 'Seinen'),
    ('shoujo', 'Shoujo'),
    ('shounen', 'Shounen'),
    ('slice-of-life', 'Slice of Life'),
    ('sports', 'Sports'),
    ('supernatural', 'Supernatural'),
]


def convert_relative_date(date):
    if not date:
        return None

    date = date.strip().lower()
    for abbreviation, unit in DATE_ABBREVIATIONS.items():
        date = re.sub(rf'\b{abbreviation}\b', unit, date)
    if date.endswith(' lalu') and not date.endswith('yang lalu'):
        date = date[:-len('lalu')] + 'yang lalu'

    return convert_date_string(date, languages=['id', 'en'])


class Komikav(Server):
    id = 'komikav'
    name = 'KomikAV'
    lang = 'id'

    base_url = 'https://komikav.net'

    series_selector = 'div.grid div.flex.overflow-hidden.rounded-md'

    filters = [
        {
            'key': 'genre',
            'type': 'select',
            'name': 'Genre',
            'description': 'Filter by genre',
            'value_type': 'single',
            'default': '',
            'options': [{'key': '', 'name': 'All'}] + [{'key': key, 'name': name} for key, name in GENRES],
        },
        {
            'key': 'status',
            'type': 'select',
            'name': 'Status',
            'description': 'Filter by status',
            'value_type': 'single',
            'default': '',
            'options': [
                {'key': '', 'name': 'All'},
                {'key': 'ongoing', 'name': 'Ongoing'},
                {'key': 'completed', 'name': 'Completed'},
            ],
        },
        {
            'key': 'type',
            'type': 'select',
            'name': 'Type',
            'description': 'Filter by type',
            'value_type': 'single',
            'default': '',
            'options': [
                {'key': '', 'name': 'All'},
                {'key': 'manga', 'name': 'Manga'},
                {'key': 'manhwa', 'name': 'Manhwa'},
                {'key': 'manhua', 'name': 'Manhua'},
            ],
        },
    ]

    @property
    def manga_url(self):
        return self.base_url + '/manga/{0}'

    @property
    def search_url(self):
        return self.base_url + '/search'

    def get_manga_data(self, initial_data):
        """
        Returns manga data by scraping manga HTML page content

        Initial data should contain at least manga's slug (provided by search)
        """
        assert 'slug' in initial_data, 'Manga slug is missing in initial data'

        r = self.session_get(self.manga_url.format(initial_data['slug']))
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

        if element := soup.select_one('h1'):
            data['name'] = element.text.strip()
        else:
            data['name'] = soup.title.text.split(' - ')[0].strip()

        if img_element := soup.select_one('img.w-full.rounded-md'):
            data['cover'] = get_soup_image_url(img_element)

        # Details
        for a_element in soup.select('div:-soup-contains("Author") + p a'):
            author = a_element.text.strip()
            if author not in data['authors']:
                data['authors'].append(author)

        data['genres'] = [a_element.text.strip() for a_element in soup.select('div.w-full.gap-4 a')]

        if element := soup.select_one('div.w-full.rounded-r-full'):
            status = element.text.strip().lower()
            if 'ongoing' in status or 'berjalan' in status:
                data['status'] = 'ongoing'
            elif 'completed' in status or 'selesai' in status:
                data['status'] = 'complete'

        if element := soup.select_one('div.mt-4.w-full p'):
            data['synopsis'] = element.text.strip()

        # Chapters
        for a_element in reversed(soup.select('div.mt-4.flex.max-h-96.flex-col a')):
            url = urlsplit(a_element.get('href')).path
            p_elements = a_element.select('div p')
            date_element = a_element.select_one('div p.text-xs')

            data['chapters'].append(dict(
                slug=url.rstrip('/').split('/')[-1],
                url=url,
                title=p_elements[0].text.strip() if p_elements else a_element.text.strip(),
                date=convert_relative_date(date_element.text) if date_element else None,
            ))

        return data

    def get_manga_chapter_data(self, manga_slug, manga_name, chapter_slug, chapter_url):
        """
        Returns manga chapter data by scraping chapter HTML page content

        Currently, only pages are expected.
        """
        r = self.session_get(self.base_url + chapter_url, headers={'Referer': self.manga_url.format(manga_slug)})
        if r.status_code != 200:
            return None

        soup = BeautifulSoup(r.text, 'html.parser')

        data = dict(
            pages=[],
        )
        for img_element in soup.select('img[src*=cdn], img[data-src*=cdn], .chapter-images img, .reading-content img'):
            if image := get_soup_image_url(img_element):
                data['pages'].append(dict(
                    slug=None,
                    image=image,
                ))

        return data

    def get_manga_chapter_page_image(self, manga_slug, manga_name, chapter_slug, page):
        """
        Returns chapter page scan (image) content
        """
        r = self.session_get(page['image'], headers={'Referer': f'{self.base_url}/'})
        if r.status_code != 200:
            return None

        mime_type = get_buffer_mime_type(r.content)
        if not mime_type.startswith('image'):
            return None

        return dict(
            buffer=r.content,
            mime_type=mime_type,
            name=page['image'].split('?')[0].split('/')[-1],
        )

    def get_manga_url(self, slug, url):
        """
        Returns manga absolute URL
        """
        return self.manga_url.format(slug)

    def get_manga_list(self, url, params=None):
        r = self.session_get(url, params=params)
        if r.status_code != 200:
            return None

        soup = BeautifulSoup(r.text, 'html.parser')

        results = []
        for element in soup.select(self.series_selector):
            a_element = element.select_one('a[href*="/manga/"]') or element.select_one('a')
            if a_element is None:
                continue

            img_element = a_element.select_one('img')
            if name_element := element.select_one('h2'):
                name = name_element.text.strip()
            else:
                name = img_element.get('alt', '').strip() if img_element else ''

            results.append(dict(
                slug=urlsplit(a_element.get('href')).path.rstrip('/').split('/')[-1],
                name=name,
                cover=get_soup_image_url(img_element),
            ))

        return results

    def get_latest_updates(self, genre=None, status=None, type=None):
        return self.get_manga_list(self.base_url, dict(page=1))

    def get_most_populars(self, genre=None, status=None, type=None):
        return self.get_manga_list(self.base_url, dict(page=1))

    def search(self, term, genre=None, status=None, type=None, page=1):
        params = dict(q=term)
        if page > 1:
            params['page'] = page
        if genre:
            params['genre'] = genre
        if status:
            params['status'] = status
        if type:
            params['type'] = type

        return self.get_manga_list(self.search_url, params)
