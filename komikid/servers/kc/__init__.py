# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from bs4 import BeautifulSoup
from urllib.parse import urlsplit

from komikid.servers import Server
from komikid.servers.utils import convert_date_string
from komikid.servers.utils import get_buffer_mime_type


def get_path(url):
    return urlsplit(url).path


class Kc(Server):
    id = 'kc'
    name = 'KC'
    lang = 'id'

    base_url = 'https://komik-cast.cc'

    date_format = '%b %d, %Y'

    @property
    def manga_list_url(self):
        return self.base_url + '/komik-list/'

    @property
    def search_url(self):
        return self.base_url + '/search/'

    def get_manga_data(self, initial_data):
        """
        Returns manga data by scraping manga HTML page content

        Initial data should contain at least manga's url (provided by search)
        """
        assert 'url' in initial_data, 'Manga url is missing in initial data'

        r = self.session_get(self.base_url + initial_data['url'])
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

        data['name'] = soup.select_one('h1.line-clamp-2, div.relative.py-2 h1').text.strip()
        if img_element := soup.select_one('.md\\:w-\\[480px\\] img, div.rounded-lg img'):
            data['cover'] = img_element.get('src')

        # Details
        data['genres'] = [span_element.text.strip() for span_element in soup.select('div.flex.flex-wrap a span')]

        info_elements = soup.select('div.text-sm.py-1.pb-2 span.font-medium')
        if info_elements:
            # Type
            data['genres'].append(info_elements[0].text.strip())
        if len(info_elements) > 1:
            status = info_elements[1].text.strip().lower()
            if 'ongoing' in status:
                data['status'] = 'ongoing'
            elif 'completed' in status:
                data['status'] = 'complete'

        if element := soup.select_one('p.my-2'):
            data['synopsis'] = element.text.strip()

        # Chapters
        for a_element in reversed(soup.select('div.flex.flex-col.overflow-y-auto a, div.flex.flex-col.max-h-96 a')):
            url = get_path(a_element.get('href'))

            if title_element := a_element.select_one('p.mb-0\\.5, div > p:first-child'):
                title = title_element.text.strip()
            else:
                title = a_element.text.strip()

            if date_element := a_element.select_one('p.text-xs'):
                date = convert_date_string(date_element.text.strip(), format=self.date_format, languages=['id', 'en'])
            else:
                date = None

            data['chapters'].append(dict(
                slug=url.rstrip('/').split('/')[-1],
                url=url,
                title=title,
                date=date,
            ))

        return data

    def get_manga_chapter_data(self, manga_slug, manga_name, chapter_slug, chapter_url):
        """
        Returns manga chapter data by scraping chapter HTML page content

        Currently, only pages are expected.
        """
        r = self.session_get(self.base_url + chapter_url)
        if r.status_code != 200:
            return None

        soup = BeautifulSoup(r.text, 'html.parser')

        data = dict(
            pages=[],
        )
        for img_element in soup.select('div.max-w-5xl img'):
            if image := img_element.get('src', '').strip():
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
        return self.base_url + url

    def get_manga_list(self, url, params):
        r = self.session_get(url, params=params)
        if r.status_code != 200:
            return None

        soup = BeautifulSoup(r.text, 'html.parser')

        results = []
        for a_element in soup.select('div.grid > a'):
            url = get_path(a_element.get('href'))
            img_element = a_element.select_one('img')

            results.append(dict(
                slug=url.rstrip('/').split('/')[-1],
                url=url,
                name=a_element.select_one('h3').text.strip(),
                cover=img_element.get('src') if img_element else None,
            ))

        return results

    def get_latest_updates(self):
        return self.get_manga_list(self.manga_list_url, dict(order='update', page=1))

    def get_most_populars(self):
        return self.get_manga_list(self.manga_list_url, dict(order='popular', page=1))

    def search(self, term):
        return self.get_manga_list(self.search_url, dict(query=term))
