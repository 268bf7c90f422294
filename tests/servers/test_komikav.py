import datetime
import logging
import pytest
from pytest_steps import test_steps

from komikid.utils import log_error_traceback

from conftest import FakeResponse
from conftest import FakeSession
from conftest import html_page
from conftest import PNG_IMAGE

logging.basicConfig(level=logging.DEBUG)

BASE_URL = 'https://komikav.net'

SEARCH_PAGE = html_page('''
<div class="grid">
  <div class="flex overflow-hidden rounded-md">
    <a href="https://komikav.net/manga/solo-leveling"><img src="https://cdn.komikav.example/solo.jpg" alt="Solo Leveling"></a>
    <h2>Solo Leveling</h2>
  </div>
</div>
''')

MANGA_PAGE = html_page('''
<h1>Solo Leveling</h1>
<img class="w-full rounded-md" src="https://cdn.komikav.example/solo.jpg">
<section>
  <div>Author</div>
  <p><a href="#">Chugong</a></p>
</section>
<div class="w-full gap-4"><a href="#">Action</a><a href="#">Fantasy</a></div>
<div class="w-full rounded-r-full">Completed</div>
<div class="mt-4 w-full"><p>Hunter story.</p></div>
<div class="mt-4 flex max-h-96 flex-col">
  <a href="https://komikav.net/chapter/solo-leveling-chapter-2"><div><p>Chapter 2</p><p class="text-xs">2 hari lalu</p></div></a>
  <a href="https://komikav.net/chapter/solo-leveling-chapter-1"><div><p>Chapter 1</p><p class="text-xs">3 mgg lalu</p></div></a>
</div>
''')

CHAPTER_PAGE = html_page('''
<div class="chapter-images">
  <img src="https://cdn.komikav.example/solo-1-01.jpg">
  <img data-src="https://cdn.komikav.example/solo-1-02.jpg">
</div>
''')


@pytest.fixture
def komikav_server(preferences):
    from komikid.servers.komikav import Komikav

    server = Komikav(preferences=preferences)
    server.session = FakeSession({
        f'{BASE_URL}/search': FakeResponse(text=SEARCH_PAGE),
        f'{BASE_URL}/manga/solo-leveling': FakeResponse(text=MANGA_PAGE),
        f'{BASE_URL}/chapter/solo-leveling-chapter-1': FakeResponse(text=CHAPTER_PAGE),
        'https://cdn.komikav.example/solo-1-01.jpg': FakeResponse(content=PNG_IMAGE),
    })

    return server


@test_steps('search', 'get_manga_data', 'get_chapter_data', 'get_page_image')
def test_komikav(komikav_server):
    # Search
    print('Search')
    try:
        response = komikav_server.search('solo', genre='action')
        slug = response[0]['slug']
    except Exception as e:
        slug = None
        log_error_traceback(e)

    assert slug == 'solo-leveling'
    assert response[0]['name'] == 'Solo Leveling'
    assert komikav_server.session.calls[-1][2]['params'] == {'q': 'solo', 'genre': 'action'}
    yield

    # Get manga data
    print('Get manga data')
    try:
        response = komikav_server.get_manga_data(dict(slug=slug))
        chapter = response['chapters'][0]
    except Exception as e:
        chapter = None
        log_error_traceback(e)

    assert chapter['slug'] == 'solo-leveling-chapter-1'
    assert chapter['url'] == '/chapter/solo-leveling-chapter-1'
    assert chapter['title'] == 'Chapter 1'
    assert isinstance(chapter['date'], datetime.date)
    assert response['authors'] == ['Chugong']
    assert response['genres'] == ['Action', 'Fantasy']
    assert response['status'] == 'complete'
    assert response['synopsis'] == 'Hunter story.'
    yield

    # Get chapter data
    print('Get chapter data')
    try:
        response = komikav_server.get_manga_chapter_data(slug, None, chapter['slug'], chapter['url'])
        page = response['pages'][0]
    except Exception as e:
        page = None
        log_error_traceback(e)

    assert [page['image'] for page in response['pages']] == [
        'https://cdn.komikav.example/solo-1-01.jpg',
        'https://cdn.komikav.example/solo-1-02.jpg',
    ]
    yield

    # Get page image
    print('Get page image')
    try:
        response = komikav_server.get_manga_chapter_page_image(slug, None, chapter['slug'], page)
    except Exception as e:
        response = None
        log_error_traceback(e)

    assert response is not None
    assert response['mime_type'] == 'image/png'
    yield


def test_komikav_filters():
    from komikid.servers.komikav import Komikav

    keys = [filter['key'] for filter in Komikav.filters]
    assert keys == ['genre', 'status', 'type']
    assert Komikav.filters[0]['options'][0] == {'key': '', 'name': 'All'}


def test_convert_relative_date():
    from komikid.servers.komikav import convert_relative_date

    today = datetime.date.today()

    assert convert_relative_date(None) is None
    assert 50 <= (today - convert_relative_date('2 bln lalu')).days <= 70
    assert 12 <= (today - convert_relative_date('2 mgg lalu')).days <= 16
