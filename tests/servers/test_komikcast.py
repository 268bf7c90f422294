import logging
import pytest
from pytest_steps import test_steps

from komikid.utils import log_error_traceback

from conftest import FakeResponse
from conftest import FakeSession
from conftest import html_page
from conftest import PNG_IMAGE

logging.basicConfig(level=logging.DEBUG)

BASE_URL = 'https://komikcast.li'
RESIZE_URL = 'https://images.weserv.nl/?w=300&q=70&url='

SEARCH_PAGE = html_page('''
<div class="list-update">
  <div class="list-update_item">
    <a href="https://komikcast.li/komik/one-piece/">
      <img src="https://cdn.komikcast.example/one-piece.jpg">
      <h3 class="title">One Piece</h3>
    </a>
  </div>
</div>
''')

MANGA_PAGE = html_page('''
<div class="komik_info">
  <div class="komik_info-content-thumbnail"><img src="https://cdn.komikcast.example/one-piece.jpg"></div>
  <h1 class="komik_info-content-body-title">One Piece Bahasa Indonesia</h1>
  <div class="komik_info-content-meta">
    <span class="komik_info-content-info"><b>Author:</b> Eiichiro Oda</span>
    <span class="komik_info-content-info"><b>Status:</b> Ongoing</span>
  </div>
  <div class="komik_info-content-genre"><a href="#">Action</a><a href="#">Adventure</a></div>
  <div class="komik_info-description-sinopsis"><p>Pirates.</p></div>
  <ul>
    <li class="komik_info-chapters-item"><a href="https://komikcast.li/chapter/one-piece-chapter-1101-bahasa-indonesia/">Chapter 1101</a></li>
    <li class="komik_info-chapters-item"><a href="https://komikcast.li/chapter/one-piece-chapter-1100-bahasa-indonesia/">Chapter 1100</a></li>
  </ul>
</div>
''')

CHAPTER_PAGE = html_page('''
<div class="main-reading-area">
  <img src="https://cdn.komikcast.example/op-1100-01.jpg">
  <img src="https://cdn.komikcast.example/op-1100-02.jpg">
</div>
''')


@pytest.fixture
def komikcast_server(preferences):
    from komikid.servers.komikcast import Komikcast

    server = Komikcast(preferences=preferences)
    server.session = FakeSession({
        f'{BASE_URL}/daftar-komik/': FakeResponse(text=SEARCH_PAGE),
        f'{BASE_URL}/daftar-komik/page/2/': FakeResponse(text=html_page('<div class="list-update"></div>')),
        f'{BASE_URL}/daftar-komik/one-piece/': FakeResponse(text=MANGA_PAGE),
        f'{BASE_URL}/chapter/one-piece-chapter-1100-bahasa-indonesia/': FakeResponse(text=CHAPTER_PAGE),
        'https://cdn.komikcast.example/op-1100-01.jpg': FakeResponse(content=PNG_IMAGE),
    })

    return server


@test_steps('search', 'get_manga_data', 'get_chapter_data', 'get_page_image')
def test_komikcast(komikcast_server):
    # Search
    print('Search')
    try:
        response = komikcast_server.search('one piece')
        slug = response[0]['slug']
    except Exception as e:
        slug = None
        log_error_traceback(e)

    assert slug == 'one-piece'
    assert response[0]['name'] == 'One Piece'
    assert response[0]['cover'] == f'{RESIZE_URL}https://cdn.komikcast.example/one-piece.jpg'
    assert komikcast_server.session.calls[-1][2]['params'] == {'s': 'one piece'}
    yield

    # Get manga data
    print('Get manga data')
    try:
        response = komikcast_server.get_manga_data(dict(slug=slug))
        chapter_slug = response['chapters'][0]['slug']
    except Exception as e:
        chapter_slug = None
        log_error_traceback(e)

    assert chapter_slug == 'one-piece-chapter-1100-bahasa-indonesia'
    assert response['name'] == 'One Piece Bahasa Indonesia'
    assert response['authors'] == ['Eiichiro Oda']
    assert response['genres'] == ['Action', 'Adventure']
    assert response['status'] == 'ongoing'
    assert response['synopsis'] == 'Pirates.'
    yield

    # Get chapter data
    print('Get chapter data')
    try:
        response = komikcast_server.get_manga_chapter_data(slug, None, chapter_slug, None)
        page = response['pages'][0]
    except Exception as e:
        page = None
        log_error_traceback(e)

    assert page == dict(slug=None, image='https://cdn.komikcast.example/op-1100-01.jpg')
    yield

    # Get page image
    print('Get page image')
    try:
        response = komikcast_server.get_manga_chapter_page_image(slug, None, chapter_slug, page)
    except Exception as e:
        response = None
        log_error_traceback(e)

    assert response is not None
    assert response['mime_type'] == 'image/png'
    assert komikcast_server.session.calls[-1][2]['headers']['Referer'] == f'{BASE_URL}/'
    yield


def test_komikcast_search_next_page(komikcast_server):
    assert komikcast_server.search('one piece', page=2) == []
    assert komikcast_server.session.calls[-1][1] == f'{BASE_URL}/daftar-komik/page/2/'
