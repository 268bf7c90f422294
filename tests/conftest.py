import json
import pytest

from komikid.models.preferences import MemoryPreferences

PNG_IMAGE = (
    b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89'
    b'\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82'
)


def html_page(body, title='Test'):
    return f'<!DOCTYPE html>\n<html lang="id">\n<head><title>{title}</title></head>\n<body>\n{body}\n</body>\n</html>\n'


class FakeResponse:
    def __init__(self, status_code=200, text=None, content=None, json_data=None, headers=None):
        self.status_code = status_code
        self.headers = headers or {}
        self._json_data = json_data

        if json_data is not None and text is None:
            text = json.dumps(json_data)
        if content is None:
            content = (text or '').encode('utf-8')
        if text is None:
            text = content.decode('utf-8', 'ignore')

        self.content = content
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json_data is not None:
            return self._json_data

        return json.loads(self.text)


class FakeSession:
    """Minimal requests.Session replacement serving canned responses by URL"""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.headers = {}
        self.calls = []

    def _respond(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))

        response = self.routes.get(url)
        if response is None:
            return FakeResponse(404, text='Not found')
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(url, **kwargs)

        return response

    def get(self, url, **kwargs):
        return self._respond('GET', url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond('POST', url, **kwargs)

    def count(self, url):
        return len([call for call in self.calls if call[1] == url])


@pytest.fixture
def preferences():
    return MemoryPreferences()
