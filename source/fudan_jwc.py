"""
复旦大学教务处公告数据源

公告列表: https://jwc.fudan.edu.cn/9397/list.htm
第 N 页: https://jwc.fudan.edu.cn/9397/list{N}.htm

列表页超出最大页码时服务器返回 404，此时视为空页（没有更多公告）。
"""

import os
import re
import html
import requests
from typing import Sequence, List, Optional
from datetime import date
from urllib.parse import urljoin

import dotenv

from core.interface import AnnouncementSource
from core.model import Announcement
from core.errors import NetworkError, DecodingError

dotenv.load_dotenv()  # 加载环境变量文件（如果存在）


class FudanJwcAnnouncementSource(AnnouncementSource):
    """复旦教务处公告数据源"""

    name = "FudanJwc"

    BASE_URL = "https://jwc.fudan.edu.cn"

    # 教务处公告栏目
    DEFAULT_SECTION = "9397"

    # 列表容器，找不到说明页面结构变了
    _LIST_CONTAINER_PATTERN = re.compile(
        r'class=["\'][^"\']*(?:news_list|wp_article_list)',
        re.IGNORECASE,
    )

    # 文章链接 + 紧随其后的发布日期，中间不能再出现另一个链接
    _ITEM_PATTERN = re.compile(
        r'<a\s(?P<attrs>[^>]*href=(?P<hq>["\'])(?P<href>(?:(?!(?P=hq))[^>])*?/c\d+a(?P<id>\d+)/page\.htm)(?P=hq)[^>]*)>'
        r'(?P<text>.*?)</a>'
        r'(?:(?!<a\s).)*?'
        r'(?P<date>\d{4}-\d{2}-\d{2})',
        re.IGNORECASE | re.DOTALL,
    )

    # 属性值用同一种引号闭合，值里可以出现另一种引号
    _TITLE_ATTR_PATTERN = re.compile(r'\btitle=(?P<q>["\'])(?P<title>.*?)(?P=q)', re.IGNORECASE | re.DOTALL)

    _TAG_PATTERN = re.compile(r"<[^>]+>")

    def __init__(
        self,
        base_url: Optional[str] = None,
        section: str = DEFAULT_SECTION,
        timeout: int = 20
    ):
        """
        初始化教务处公告源

        Args:
            base_url: 站点地址，为 None 时从环境变量 FUDAN_JWC_BASE_URL 读取，再没有则用官网地址
            section: 公告栏目编号
            timeout: 请求超时时间（秒）
        """
        self.base_url = (base_url or os.getenv("FUDAN_JWC_BASE_URL") or self.BASE_URL).rstrip("/")
        self.section = section
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36',
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'zh-CN,zh;q=0.9,en;q=0.8',
        })

    def build_page_url(self, page: int) -> str:
        """构建第 page 页的列表 URL"""
        return f"{self.base_url}/{self.section}/list{page}.htm"

    def fetch_page(self, page: int) -> Sequence[Announcement]:
        """
        拉取一页公告

        Args:
            page: 页码，从 1 开始

        Returns:
            Announcement 列表，保持页面上的顺序；页不存在时返回空列表

        Raises:
            NetworkError: 请求失败或服务器返回错误状态码
            DecodingError: 页面中找不到公告列表
        """
        if page < 1:
            raise ValueError(f"页码必须从 1 开始: {page}")

        url = self.build_page_url(page)

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(self.name, f"{url}: {e}") from e

        if response.status_code == 404:
            return []

        try:
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(self.name, f"{url}: {e}") from e

        response.encoding = "utf-8"
        return self._parse_list(response.text)

    def _parse_list(self, page_html: str) -> List[Announcement]:
        """
        从列表页 HTML 中解析公告

        Args:
            page_html: 列表页 HTML

        Returns:
            Announcement 列表
        """
        if not self._LIST_CONTAINER_PATTERN.search(page_html):
            raise DecodingError(self.name, "未找到公告列表")

        announcements = []

        for match in self._ITEM_PATTERN.finditer(page_html):
            try:
                announcements.append(self._parse_item(match))
            except ValueError as e:
                print(f"[跳过] 解析公告失败: {e}, href: {match.group('href')}")
                continue

        return announcements

    def _parse_item(self, match: "re.Match[str]") -> Announcement:
        title_match = self._TITLE_ATTR_PATTERN.search(match.group("attrs"))
        if title_match and title_match.group("title").strip():
            title = title_match.group("title")
        else:
            title = self._TAG_PATTERN.sub("", match.group("text"))
        title = html.unescape(title).strip()
        if not title:
            raise ValueError("标题为空")

        return Announcement(
            id=int(match.group("id")),
            title=title,
            date=date.fromisoformat(match.group("date")),
            url=urljoin(f"{self.base_url}/", match.group("href")),
        )

    def close(self) -> None:
        """关闭会话"""
        self.session.close()


# 使用示例
if __name__ == "__main__":
    source = FudanJwcAnnouncementSource()

    announcements = source.fetch_page(1)

    print(f"共获取 {len(announcements)} 条公告:\n")

    for ann in announcements:
        print(f"[{ann.date_str}] {ann.title}")
        print(f"链接: {ann.url}")
        print("-" * 80)
