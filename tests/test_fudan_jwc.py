"""Tests for the Fudan Academic Affairs Office list scraper."""

from datetime import date

import pytest
import requests

from core.errors import DecodingError, NetworkError
from source.fudan_jwc import FudanJwcAnnouncementSource


LIST_HTML = """
<html><body>
<div id="wp_news_w6">
<ul class="news_list list2">
  <li class="news n1 clearfix">
    <span class="news_title"><a href='/2024/0520/c9397a700101/page.htm' target='_blank' title='关于2024年暑期学校选课的通知'>关于2024年暑期学校选课的...</a></span>
    <span class="news_meta">2024-05-20</span>
  </li>
  <li class="news n2 clearfix">
    <span class="news_title"><a href='/2024/0517/c9397a700088/page.htm' target='_blank'>期末考试安排&amp;注意事项</a></span>
    <span class="news_meta">2024-05-17</span>
  </li>
  <li class="news n3 clearfix">
    <span class="news_title"><a href='https://www.fudan.edu.cn/2024/0510/c1234a55/page.htm' target='_blank' title='学校通知'>学校通知</a></span>
    <span class="news_meta">2024-05-10</span>
  </li>
</ul>
</div>
</body></html>
"""

EMPTY_LIST_HTML = '<html><body><ul class="news_list list2"></ul></body></html>'


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self.text = text
        self.encoding = None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        pass


def make_source(response=None, error=None) -> FudanJwcAnnouncementSource:
    source = FudanJwcAnnouncementSource(base_url="https://jwc.example.edu.cn/", timeout=5)
    source.session = FakeSession(response, error)
    return source


def test_page_url_uses_section_and_page() -> None:
    source = FudanJwcAnnouncementSource(base_url="https://jwc.example.edu.cn/", section="1234")
    assert source.build_page_url(3) == "https://jwc.example.edu.cn/1234/list3.htm"


def test_base_url_falls_back_to_environment(monkeypatch) -> None:
    monkeypatch.setenv("FUDAN_JWC_BASE_URL", "http://localhost:8080")
    source = FudanJwcAnnouncementSource()
    assert source.build_page_url(1) == "http://localhost:8080/9397/list1.htm"


def test_parses_items_in_page_order() -> None:
    source = make_source(FakeResponse(200, LIST_HTML))

    announcements = source.fetch_page(1)

    assert source.session.urls == ["https://jwc.example.edu.cn/9397/list1.htm"]
    assert [ann.id for ann in announcements] == [700101, 700088, 55]
    first, second, third = announcements
    assert first.title == "关于2024年暑期学校选课的通知"
    assert first.date == date(2024, 5, 20)
    assert first.url == "https://jwc.example.edu.cn/2024/0520/c9397a700101/page.htm"
    # without a title attribute the link text is used
    assert second.title == "期末考试安排&注意事项"
    assert second.date_str == "2024-05-17"
    assert third.url == "https://www.fudan.edu.cn/2024/0510/c1234a55/page.htm"


def test_empty_list_page_returns_no_items() -> None:
    source = make_source(FakeResponse(200, EMPTY_LIST_HTML))
    assert source.fetch_page(2) == []


def test_missing_page_is_treated_as_empty() -> None:
    source = make_source(FakeResponse(404, "Not Found"))
    assert source.fetch_page(99) == []


def test_server_error_raises_network_error() -> None:
    source = make_source(FakeResponse(502, "Bad Gateway"))
    with pytest.raises(NetworkError):
        source.fetch_page(1)


def test_transport_error_raises_network_error() -> None:
    source = make_source(error=requests.ConnectionError("connection refused"))
    with pytest.raises(NetworkError) as exc_info:
        source.fetch_page(1)
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_page_without_list_raises_decoding_error() -> None:
    source = make_source(FakeResponse(200, "<html><body>系统维护中</body></html>"))
    with pytest.raises(DecodingError):
        source.fetch_page(1)


def test_invalid_date_item_is_skipped(capsys) -> None:
    page_html = LIST_HTML.replace("2024-05-17", "2024-13-40")
    source = make_source(FakeResponse(200, page_html))

    announcements = source.fetch_page(1)

    assert [ann.id for ann in announcements] == [700101, 55]
    assert "[跳过]" in capsys.readouterr().out


def test_page_must_start_from_one() -> None:
    source = make_source(FakeResponse(200, LIST_HTML))
    with pytest.raises(ValueError):
        source.fetch_page(0)
    assert source.session.urls == []


def test_quoted_attributes_may_contain_the_other_quote() -> None:
    page_html = (
        '<ul class="news_list">'
        '<li><a href="/2024/0601/c9397a700200/page.htm" title="Dean\'s List 2024">Dean\'s...</a>'
        '<span class="news_meta">2024-06-01</span></li>'
        "<li><a href='/2024/0602/c9397a700201/page.htm' title='\"强基计划\"选拔通知'>强基...</a>"
        '<span class="news_meta">2024-06-02</span></li>'
        '</ul>'
    )
    source = make_source(FakeResponse(200, page_html))

    announcements = source.fetch_page(1)

    assert [ann.title for ann in announcements] == ["Dean's List 2024", '"强基计划"选拔通知']
    assert announcements[0].url == "https://jwc.example.edu.cn/2024/0601/c9397a700200/page.htm"
    assert [ann.id for ann in announcements] == [700200, 700201]
