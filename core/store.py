"""
公告缓存

按页从 AnnouncementSource 拉取公告并累积在内存中，供公告列表"加载更多"和"下拉刷新"使用。
缓存只在当前进程内有效，重启后重新从第 1 页开始。
"""

import asyncio
from typing import List, Optional

from core.interface import AnnouncementSource
from core.model import Announcement


class AnnouncementStore:
    """增量分页的公告缓存

    next_page / exhausted / 已累积的公告 三者作为一个整体由同一把锁保护，
    同一时刻只有一个拉取-更新流程在执行，其他调用者排队等待。

    锁在第一次使用时于当前事件循环中创建；换到新的事件循环（例如再次 asyncio.run）时重新创建，
    同一个缓存不能同时在两个事件循环中使用。
    """

    def __init__(self, source: AnnouncementSource):
        """
        初始化缓存

        Args:
            source: 公告数据源，提供 fetch_page(page)
        """
        self.source = source
        self._next_page = 1
        self._exhausted = False
        self._announcements: List[Announcement] = []
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def next_page(self) -> int:
        return self._next_page

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def announcements(self) -> List[Announcement]:
        return list(self._announcements)

    async def get_cached_announcements(self) -> List[Announcement]:
        """
        拉取下一页并返回完整列表；已经拉到空页时直接返回缓存

        Returns:
            目前累积的全部公告，按拉取顺序排列

        Raises:
            数据源抛出的任何异常，此时缓存状态不变，下次调用会重试同一页
        """
        async with self._get_lock():
            if self._exhausted:
                return list(self._announcements)

            delta = await self._fetch(self._next_page)

            # 拉取成功后才修改状态
            self._next_page += 1
            self._announcements.extend(delta)
            self._exhausted = not delta
            return list(self._announcements)

    async def get_refreshed_announcements(self) -> List[Announcement]:
        """
        清空缓存并重新拉取第 1 页

        Returns:
            第 1 页的公告

        Raises:
            数据源抛出的任何异常，此时缓存保持清空状态（next_page=1，列表为空）
        """
        async with self._get_lock():
            self._next_page = 1
            self._exhausted = False
            self._announcements = []

            first_page = await self._fetch(self._next_page)

            self._next_page += 1
            self._announcements = list(first_page)
            self._exhausted = not first_page
            return list(self._announcements)

    def _get_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def _fetch(self, page: int) -> List[Announcement]:
        # fetch_page 是阻塞调用，放到线程里执行
        worker = asyncio.ensure_future(asyncio.to_thread(self.source.fetch_page, page))
        try:
            return list(await asyncio.shield(worker))
        except asyncio.CancelledError:
            # 线程里的请求无法中断，等它结束后才释放锁，结果丢弃
            await asyncio.wait({worker})
            if not worker.cancelled():
                worker.exception()
            raise
