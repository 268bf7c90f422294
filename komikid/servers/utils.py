# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from bs4 import NavigableString
import dateparser
import datetime
from functools import cache
import importlib
import inspect
import logging
import magic
from operator import itemgetter
from pkgutil import iter_modules

logger = logging.getLogger(__name__)


def convert_date_string(date, format=None, languages=None):
    """Converts a date string into a date, today's date if it can't be parsed

    Relative dates (`3 jam yang lalu`, `2 days ago`) are supported.
    """
    d = None

    if date:
        date = date.strip()
        if format is not None:
            try:
                d = datetime.datetime.strptime(date, format)
            except Exception:
                d = dateparser.parse(date, languages=languages)
        else:
            d = dateparser.parse(date, languages=languages)

    if not d:
        d = datetime.datetime.now()

    return d.date()


def get_buffer_mime_type(buffer):
    try:
        if hasattr(magic, 'detect_from_content'):
            # Using file-magic module: https://github.com/file/file
            return magic.detect_from_content(buffer[:128]).mime_type  # noqa: TC300

        # Using python-magic module: https://github.com/ahupp/python-magic
        return magic.from_buffer(buffer[:128], mime=True)  # noqa: TC300
    except Exception:
        return ''


def get_server_class_name_by_id(id):
    """Returns server class name

    id format is:

    name[_lang][:module_name]

    - `name` is the name of the server.
    - `lang` is the language of the server (optional).
      Only useful when server belongs to a multi-languages server.
    - `module_name` is the name of the module in which the server is defined (optional).
      Only useful if `module_name` is different from `name`.
    """
    return id.split(':')[0].capitalize()


def get_server_main_id_by_id(id):
    return id.split(':')[0].split('_')[0]


def get_server_module_name_by_id(id):
    return id.split(':')[-1].split('_')[0]


@cache
def get_servers_list(include_disabled=False, order_by=('lang', 'name')):
    import komikid.servers

    modules = []
    for _finder, name, ispkg in iter_modules(komikid.servers.__path__, komikid.servers.__name__ + '.'):
        if not ispkg:
            continue

        modules.append(importlib.import_module(name))

    servers = []
    for module in modules:
        for _name, obj in dict(inspect.getmembers(module)).items():
            if not inspect.isclass(obj) or obj.__module__ != module.__name__:
                continue
            if not hasattr(obj, 'id') or not hasattr(obj, 'name') or not hasattr(obj, 'lang'):
                continue

            if not include_disabled and obj.status == 'disabled':
                continue

            servers.append(dict(
                id=obj.id,
                name=obj.name,
                lang=obj.lang,
                is_nsfw=obj.is_nsfw,
                class_name=get_server_class_name_by_id(obj.id),
                module=module,
            ))

    logger.debug('%d servers found', len(servers))

    return sorted(servers, key=itemgetter(*order_by))


def get_soup_element_inner_text(outer, text=None):
    if text is None:
        text = []

    for el in outer:
        if isinstance(el, NavigableString):
            text.append(el.strip())
        else:
            get_soup_element_inner_text(el, text)

    return ' '.join(filter(None, text)).strip()


def get_soup_image_url(img_element):
    """Returns URL of an image element, lazy-loading attributes first"""
    if img_element is None:
        return None

    for attr in ('data-lazy-src', 'data-src', 'src'):
        if value := img_element.get(attr):
            value = value.strip()
            if value.startswith('//'):
                value = f'https:{value}'

            return value

    return None


def resize_image_url(url, service):
    """Prefixes an image URL with the URL of a resize service (ex: https://wsrv.nl/?w=110&h=150&url=)

    The image URL is not encoded: services accept it as is.
    """
    if not url or not service:
        return url

    return f'{service}{url}'
