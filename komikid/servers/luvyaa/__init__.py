# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

import re

from komikid.servers.exceptions import ServerException
from komikid.servers.multi.manga_stream import MangaStream
from komikid.servers.utils import resize_image_url

RESIZE_COVER_URL = 'https://wsrv.nl/?w=110&h=150&url='

CHAPTER_ID_REGEX = re.compile(r'chapter_id\s*=\s*(\d+)')


class Luvyaa(MangaStream):
    id = 'luvyaa'
    name = 'Luvyaa'
    lang = 'id'

    base_url = 'https://luvyaa.my.id'

    date_languages = ['id', ]

    name_from_thumbnail_alt = True

    @property
    def api_url(self):
        return self.base_url + '/wp-admin/admin-ajax.php'

    def get_cover_url(self, url):
        return resize_image_url(url, RESIZE_COVER_URL)

    def get_manga_chapter_pages_images(self, soup):
        """Pages images are retrieved via an AJAX request, chapter ID is found in a script"""
        chapter_id = None
        for script_element in soup.find_all('script'):
            if script_element.string and (matches := CHAPTER_ID_REGEX.search(script_element.string)):
                chapter_id = matches.group(1)
                break

        if chapter_id is None:
            raise ServerException('Post ID not found')

        r = self.session_post(
            self.api_url,
            data={
                'action': 'get_image_json',
                'post_id': chapter_id,
            },
            headers={
                'X-Requested-With': 'XMLHttpRequest',
                'Referer': f'{self.base_url}/',
            }
        )
        if r.status_code != 200:
            raise ServerException('Pages not found')

        images = []
        for source in r.json()['data']['data']['sources']:
            if source['images']:
                images = source['images']
                break

        return [self.get_page_image_url(image) for image in images if not self.is_page_ignored(image)]

    def get_page_image_url(self, url):
        return resize_image_url(url, self.resize_service_url)
