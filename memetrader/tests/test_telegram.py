from memetrader.notify.telegram import TelegramNotifier


class _FakeSession:
    def __init__(self, exc=None, status_code=200):
        self.exc = exc
        self.status_code = status_code
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        if self.exc:
            raise self.exc

        class _R:
            status_code = self.status_code
            text = "err"

        return _R()


def test_disabled_sends_nothing():
    s = _FakeSession()
    TelegramNotifier("t", "c", enabled=False, session=s).send("hi")
    assert s.posts == []


def test_missing_credentials_sends_nothing():
    s = _FakeSession()
    TelegramNotifier("", "c", enabled=True, session=s).send("hi")
    assert s.posts == []


def test_sends_markdown_message():
    s = _FakeSession()
    TelegramNotifier("tok", "42", enabled=True, session=s).send("*Buy*")
    url, body = s.posts[0]
    assert url == "https://api.telegram.org/bottok/sendMessage"
    assert body == {"chat_id": "42", "text": "*Buy*", "parse_mode": "Markdown"}


def test_transport_error_never_raises():
    s = _FakeSession(exc=OSError("network"))
    TelegramNotifier("tok", "42", enabled=True, session=s).send("hi")
    assert len(s.posts) == 1


def test_http_error_never_raises():
    s = _FakeSession(status_code=400)
    TelegramNotifier("tok", "42", enabled=True, session=s).send("hi")
    assert len(s.posts) == 1
