import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from relaybot.core.exceptions import FetchError
from relaybot.scraper import page_fetcher
from relaybot.scraper.page_fetcher import PageFetcher, extract_text, strip_html

ARTICLE = """
<html>
  <head><title>Rust &amp; Python</title><style>body { color: red; }</style></head>
  <body>
    <script>var tracking = true;</script>
    <div id="sidebar" class="menu">
      <a href="/">Home</a> <a href="/about">About us</a> <a href="/subscribe">Subscribe today</a>
    </div>
    <div class="article-body">
      <p>Rust and Python are often used together, with Rust compiled into extension modules that Python code imports directly.</p>
      <p>The bindings expose native functions as ordinary callables, so existing scripts gain speed without being rewritten.</p>
      <p>Packaging tools build wheels for each platform, which means users install the extension like any other dependency.</p>
    </div>
  </body>
</html>
"""


def test_strip_html_removes_markup():
    markup = (
        "<style>p { color: red; }</style><script>var tracking = true;</script>"
        "<h1>Rust &amp; Python</h1><p>First   paragraph.</p><div>Second<br/>line</div>"
    )
    text = strip_html(markup)

    assert "tracking" not in text
    assert "color" not in text
    assert "<" not in text
    assert "Rust & Python" in text
    assert text.startswith("Rust & Python")
    assert "Rust and Python are often used together" in text
    assert "Second\nline" in text


def test_extract_text_keeps_article_and_title():
    text = extract_text(ARTICLE)

    assert text.startswith("Rust & Python\n\n")
    assert "Rust and Python are often used together" in text
    assert "like any other dependency." in text
    assert "Subscribe today" not in text
    assert "tracking" not in text
    assert "color" not in text
    assert "<" not in text


def test_extract_text_goes_through_readability(monkeypatch):
    class StubDocument:
        def __init__(self, markup):
            self.markup = markup

        def summary(self, html_partial=False):
            return "<div><p>Main story text.</p></div>"

        def title(self):
            return "[no-title]"

    monkeypatch.setattr(page_fetcher, "Document", StubDocument)

    assert extract_text("<html><body>ignored</body></html>") == "Main story text."


def _with_server(handler_map, scenario):
    async def run():
        app = web.Application()
        for path, handler in handler_map.items():
            app.router.add_get(path, handler)
        server = test_utils.TestServer(app)
        await server.start_server()
        fetcher = PageFetcher({'timeout': 5.0, 'user_agent': 'relaybot-test'})
        try:
            return await scenario(fetcher, server)
        finally:
            await fetcher.close()
            await server.close()
    return asyncio.run(run())


async def _article(request):
    return web.Response(text=ARTICLE, content_type='text/html')


async def _plain(request):
    return web.Response(text="  plain body  ", content_type='text/plain')


async def _empty(request):
    return web.Response(text="<html><body><script>x()</script></body></html>", content_type='text/html')


async def _missing(request):
    return web.Response(status=404, text="not here")


def test_fetch_returns_page_text():
    async def scenario(fetcher, server):
        return await fetcher.fetch(str(server.make_url('/article')))

    text = _with_server({'/article': _article}, scenario)
    assert text.startswith("Rust & Python")
    assert "Rust and Python are often used together" in text


def test_fetch_plain_text():
    async def scenario(fetcher, server):
        return await fetcher.fetch(str(server.make_url('/plain')))

    assert _with_server({'/plain': _plain}, scenario) == "plain body"


@pytest.mark.parametrize("path,handler", [('/missing', _missing), ('/empty', _empty)])
def test_fetch_failures_raise_fetch_error(path, handler):
    async def scenario(fetcher, server):
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(str(server.make_url(path)))
        return exc_info.value

    error = _with_server({path: handler}, scenario)
    assert path in error.url


def test_unsupported_scheme_is_rejected():
    fetcher = PageFetcher({})

    with pytest.raises(FetchError):
        asyncio.run(fetcher.fetch("ftp://example.com/file"))


def test_connection_failure_is_wrapped():
    async def run():
        fetcher = PageFetcher({'timeout': 2.0})
        try:
            # Port 9 on localhost is expected to refuse connections
            await fetcher.fetch("http://127.0.0.1:9/")
        finally:
            await fetcher.close()

    with pytest.raises(FetchError) as exc_info:
        asyncio.run(run())
    assert exc_info.value.original_error is not None
