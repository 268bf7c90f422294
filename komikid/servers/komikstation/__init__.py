# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from komikid.servers.multi.manga_stream import MangaStream
from komikid.servers.utils import resize_image_url

DEFAULT_RESIZE_SERVICE_URL = 'https://wsrv.nl/?w=110&h=150&url='


class Komikstation(MangaStream):
    id = 'komikstation'
    name = 'Komik Station'
    lang = 'id'

    base_url = 'https://komikstation.org'

    random_slugs = True
    date_languages = ['id', ]

    genres_selector = '.infox .mgen a'

    @property
    def resize_service_url(self):
        return super().resize_service_url or DEFAULT_RESIZE_SERVICE_URL

    def get_cover_url(self, url):
        return resize_image_url(url, self.resize_service_url)

    def get_manga_chapter_pages_images(self, soup):
        # Same image can be present several times
        return list(dict.fromkeys(super().get_manga_chapter_pages_images(soup)))

    def get_page_image_url(self, url):
        return resize_image_url(url, self.resize_service_url)
