import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from archive_hub.errors import NavigationError, SizeLimitError
from archive_hub.services.session import FetchSession, check_body_size, check_declared_size
from fakes import FakeBrowser, FakeResponse

URL = "https://example.com/"


def open_session(browser, url=URL):
    async def run():
        async with FetchSession(browser, url, timeout_ms=1234) as session:
            return session, session.content_type, session.content_length

    return asyncio.run(run())


def test_session_navigates_until_network_idle_and_closes_page():
    browser = FakeBrowser()
    session, content_type, length = open_session(browser)

    page = browser.pages[0]
    assert page.goto_kwargs == {"wait_until": "networkidle", "timeout": 1234}
    assert page.closed
    assert browser.open_pages == 0
    assert content_type == "text/html; charset=utf-8"
    assert length is None
    assert session.status == 200


def test_headers_are_case_insensitive():
    browser = FakeBrowser(default=FakeResponse(headers={"Content-Type": "image/png", "Content-Length": " 42 "}))
    _, content_type, length = open_session(browser)
    assert content_type == "image/png"
    assert length == 42


def test_unparseable_content_length_is_ignored():
    browser = FakeBrowser(default=FakeResponse(headers={"content-length": "lots"}))
    _, _, length = open_session(browser)
    assert length is None


@pytest.mark.parametrize("error", [
    PlaywrightError("net::ERR_NAME_NOT_RESOLVED at https://example.com/"),
    PlaywrightTimeoutError("Timeout 1234ms exceeded."),
])
def test_navigation_failures_raise_and_close_page(error):
    browser = FakeBrowser(routes={URL: error})
    with pytest.raises(NavigationError) as info:
        open_session(browser)
    assert str(error) in str(info.value)
    assert browser.pages[0].closed


@pytest.mark.parametrize("status", [304, 404, 500])
def test_non_success_status_is_a_navigation_error(status):
    browser = FakeBrowser(routes={URL: FakeResponse(status=status)})
    with pytest.raises(NavigationError, match=f"HTTP {status}"):
        open_session(browser)
    assert browser.open_pages == 0


def test_page_closed_when_block_raises():
    browser = FakeBrowser()

    async def run():
        async with FetchSession(browser, URL):
            raise RuntimeError("saver blew up")

    with pytest.raises(RuntimeError):
        asyncio.run(run())
    assert browser.pages[0].closed


def test_declared_size_over_limit():
    with pytest.raises(SizeLimitError, match="exceeds 1GB"):
        check_declared_size(1073741825, 1073741824)


def test_declared_size_at_limit_or_missing_passes():
    check_declared_size(1073741824, 1073741824)
    check_declared_size(None, 1073741824)


def test_body_size_checks_real_length():
    check_body_size(b"x" * 10, 10)
    with pytest.raises(SizeLimitError, match="10 bytes"):
        check_body_size(b"x" * 11, 10)
