# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

import logging

from komikid.servers import Server
from komikid.servers import USER_AGENT
from komikid.servers.exceptions import ServerException
from komikid.servers.utils import convert_date_string
from komikid.servers.utils import get_buffer_mime_type

logger = logging.getLogger(__name__)

# Image proxies, selected by `proxy_mode` preference
PROXIES = {
    'wsrv': 'https://wsrv.nl/?w={width}&q={quality}&url={url}',
    'images': 'https://images.weserv.nl/?w={width}&q={quality}&url={url}',
    'img': 'https://img.weserv.nl/?w={width}&q={quality}&url={url}',
    'direct': '{url}',
}

STATUSES = {
    1: 'ongoing',
    2: 'complete',
}


class Shinigami(Server):
    id = 'shinigami'
    name = 'Shinigami'
    lang = 'id'

    base_url = 'https://app.shinigami.asia'
    api_url = 'https://api.shngm.io/v1'
    cdn_url = 'https://delivery.shngm.id'

    page_size = 30

    def __init__(self, preferences=None):
        super().__init__(preferences)

        self.api_headers = {
            'User-Agent': USER_AGENT,
            'Accept': 'application/json',
            'DNT': '1',
            'Origin': self.base_url,
            'Sec-GPC': '1',
        }

    def get_image_proxy_url(self, url, width=300, quality=75):
        """Returns URL of an image through the selected proxy (or the custom one)"""
        if custom_proxy := self.resize_service_url:
            return f'{custom_proxy}{url}'

        mode = self.preferences.get_string('proxy_mode', 'wsrv')
        if mode not in PROXIES:
            logger.debug('%s: unknown proxy mode %s, fallback to wsrv', self.id, mode)
            mode = 'wsrv'

        return PROXIES[mode].format(width=width, quality=quality, url=url)

    @staticmethod
    def check_slug(slug):
        # Mangas added with a previous version of the server have a slug of the form `/series/...`
        if slug.startswith('/series/'):
            raise ServerException('Please migrate this manga from Shinigami to Shinigami (same server)')

    def get_manga_data(self, initial_data):
        """
        Returns manga data from API

        Initial data should contain at least manga's slug (provided by search)
        """
        assert 'slug' in initial_data, 'Manga slug is missing in initial data'

        self.check_slug(initial_data['slug'])

        r = self.session_get(f'{self.api_url}/manga/detail/{initial_data["slug"]}', headers=self.api_headers)
        if r.status_code != 200:
            return None

        resp_data = r.json()['data']

        data = initial_data.copy()
        data.update(dict(
            authors=[],
            scanlators=[],
            genres=[],
            status=STATUSES.get(resp_data.get('status')),
            synopsis=resp_data.get('description'),
            chapters=[],
            server_id=self.id,
            cover=None,
        ))

        data['name'] = resp_data.get('title') or initial_data.get('name')
        if cover := resp_data.get('cover_image_url'):
            data['cover'] = self.get_image_proxy_url(cover, width=150)

        taxonomy = resp_data.get('taxonomy') or {}
        for key in ('Author', 'Artist'):
            for item in taxonomy.get(key) or []:
                if item['name'] not in data['authors']:
                    data['authors'].append(item['name'])
        for key in ('Genre', 'Format'):
            data['genres'] += [item['name'] for item in taxonomy.get(key) or []]

        # Chapters
        r = self.session_get(
            f'{self.api_url}/chapter/{initial_data["slug"]}/list',
            params=dict(page_size=3000),
            headers=self.api_headers
        )
        if r.status_code != 200:
            return None

        for chapter in reversed(r.json()['data']):
            number = str(chapter['chapter_number']).removesuffix('.0')
            title = f'Chapter {number}'
            if chapter.get('chapter_title'):
                title = f'{title} {chapter["chapter_title"]}'

            data['chapters'].append(dict(
                slug=chapter['chapter_id'],
                title=title,
                date=convert_date_string(chapter.get('release_date'), format='%Y-%m-%dT%H:%M:%SZ'),
            ))

        return data

    def get_manga_chapter_data(self, manga_slug, manga_name, chapter_slug, chapter_url):
        """
        Returns manga chapter data from API

        Currently, only pages are expected.
        """
        self.check_slug(chapter_slug)

        r = self.session_get(f'{self.api_url}/chapter/detail/{chapter_slug}', headers=self.api_headers)
        if r.status_code != 200:
            return None

        chapter = r.json()['data']['chapter']
        use_proxy = self.preferences.get_boolean('use_image_proxy', True)

        data = dict(
            pages=[],
        )
        for name in chapter['data']:
            image = f'{self.cdn_url}{chapter["path"]}{name}'
            if use_proxy:
                image = self.get_image_proxy_url(image, width=1200, quality=85)

            data['pages'].append(dict(
                slug=None,
                image=image,
                name=name,
            ))

        logger.debug('%s: %d pages, proxy %s', self.id, len(data['pages']), 'enabled' if use_proxy else 'disabled')

        return data

    def get_manga_chapter_page_image(self, manga_slug, manga_name, chapter_slug, page):
        """
        Returns chapter page scan (image) content
        """
        r = self.session_get(
            page['image'],
            headers={
                'Accept': 'image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8',
                'DNT': '1',
                'Referer': f'{self.base_url}/',
                'Sec-GPC': '1',
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
            name=page.get('name') or page['image'].split('?')[0].split('/')[-1],
        )

    def get_manga_url(self, slug, url):
        """
        Returns manga absolute URL
        """
        return f'{self.base_url}/series/{slug}'

    def get_manga_list(self, term=None, sort=None, page=1):
        params = dict(
            page=page,
            page_size=self.page_size,
        )
        if sort:
            params['sort'] = sort
        if term:
            params['q'] = term

        r = self.session_get(f'{self.api_url}/manga/list', params=params, headers=self.api_headers)
        if r.status_code != 200:
            return None

        results = []
        for item in r.json()['data']:
            cover = item.get('cover_image_url')

            results.append(dict(
                slug=item['manga_id'],
                name=item.get('title') or '',
                cover=self.get_image_proxy_url(cover, width=150) if cover else None,
            ))

        return results

    def get_latest_updates(self):
        return self.get_manga_list(sort='latest')

    def get_most_populars(self):
        return self.get_manga_list(sort='popularity')

    def search(self, term, page=1):
        return self.get_manga_list(term=term, page=page)
