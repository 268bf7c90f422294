# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from komikid.servers.multi.manga_stream import MangaStream
from komikid.servers.utils import resize_image_url

RESIZE_COVER_URL = 'https://wsrv.nl/?w=110&h=150&url='


class Kiryuu(MangaStream):
    id = 'kiryuu'
    name = 'Kiryuu'
    lang = 'id'

    base_url = 'https://kiryuu02.com'

    random_slugs = True
    date_languages = ['id', ]

    name_from_thumbnail_alt = True
    authors_selector = '.infox .fmed:-soup-contains("Author") span, .infox .fmed:-soup-contains("Artist") span'
    genres_selector = '.infox .mgen a'
    scanlators_selector = '.infox .fmed:-soup-contains("Serialization") span'

    # Ads and credits pages
    ignored_pages_keywords = ['999.jpg', 'logov2.png', ]

    def get_cover_url(self, url):
        return resize_image_url(url, RESIZE_COVER_URL)

    def get_page_image_url(self, url):
        return resize_image_url(url, self.resize_service_url)

    def is_page_ignored(self, url):
        name = url.split('?')[0].lower()

        return any(keyword in name for keyword in self.ignored_pages_keywords)
