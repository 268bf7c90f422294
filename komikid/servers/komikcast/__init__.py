# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from komikid.servers import USER_AGENT
from komikid.servers.multi.manga_stream import MangaStream
from komikid.servers.utils import get_buffer_mime_type
from komikid.servers.utils import resize_image_url

DEFAULT_RESIZE_SERVICE_URL = 'https://images.weserv.nl/?w=300&q=70&url='


class Komikcast(MangaStream):
    id = 'komikcast'
    name = 'Komik Cast'
    lang = 'id'

    base_url = 'https://komikcast.li'
    manga_url_directory = '/daftar-komik'

    headers = {
        'User-Agent': USER_AGENT,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9,id;q=0.8',
    }

    date_languages = ['id', ]

    series_selector = 'div.list-update_item a'
    series_name_selector = 'h3.title'

    name_selector = 'h1.komik_info-content-body-title'
    thumbnail_selector = '.komik_info-content-thumbnail img'
    authors_selector = '.komik_info-content-info:-soup-contains("Author")'
    genres_selector = '.komik_info-content-genre a'
    status_selector = '.komik_info-content-info:-soup-contains("Status")'
    synopsis_selector = '.komik_info-description-sinopsis'

    chapters_selector = '.komik_info-chapters-item'
    page_selector = 'div.main-reading-area img'

    @property
    def chapter_url(self):
        return self.base_url + '/chapter/{chapter_slug}/'

    @property
    def resize_service_url(self):
        return super().resize_service_url or DEFAULT_RESIZE_SERVICE_URL

    def compute_status(self, label):
        return super().compute_status(label.split(':')[-1] if label else label)

    def get_cover_url(self, url):
        if url and url.startswith('/'):
            url = self.base_url + url

        return resize_image_url(url, self.resize_service_url)

    def get_manga_data(self, initial_data):
        data = super().get_manga_data(initial_data)
        if data is None:
            return None

        # Remove labels (`Author: ...`)
        data['authors'] = [author.split(':', 1)[-1].strip() for author in data['authors']]

        return data

    def get_manga_chapter_page_image(self, manga_slug, manga_name, chapter_slug, page):
        r = self.session_get(
            page['image'],
            headers={
                'Accept': 'image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8',
                'Referer': f'{self.base_url}/',
            }
        )
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

    def get_manga_list(self, page=1, **params):
        url = self.manga_list_url
        if page > 1:
            url += f'page/{page}/'

        r = self.session_get(url, params=params)
        if r.status_code != 200:
            return None

        return self.parse_manga_list(r.text)

    def get_latest_updates(self):
        return self.get_manga_list(sortby='update')

    def get_most_populars(self):
        return self.get_manga_list(orderby='popular')

    def search(self, term, page=1):
        return self.get_manga_list(page=page, s=term)
