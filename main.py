"""
教务处公告浏览主程序

工作流程：
1. 从 config.yaml 读取数据源和浏览参数
2. 创建本次会话使用的公告缓存
3. 首次进入时拉取第 1 页
4. 输入 n（或直接回车）加载更多，r 重新加载，q 退出
"""

import asyncio
import argparse
import threading
import yaml
from pathlib import Path
from typing import List, Optional

from core.model import Announcement
from core.errors import AnnouncementFetchError
from core.store import AnnouncementStore
from source.fudan_jwc import FudanJwcAnnouncementSource


HELP_TEXT = "命令: n/more/回车 加载更多 | r/refresh 重新加载 | q/quit/exit 退出"


async def read_line(prompt: str) -> str:
    """
    在守护线程里读取一行输入

    守护线程不会被事件循环关闭时等待，Ctrl-C 后进程可以直接退出。

    Raises:
        EOFError: 输入流已关闭
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _deliver(setter, value) -> None:
        if not future.done():
            setter(value)

    def _reader() -> None:
        try:
            line = input(prompt)
        except (EOFError, OSError, ValueError) as e:
            callback = (_deliver, future.set_exception, e)
        else:
            callback = (_deliver, future.set_result, line)
        try:
            loop.call_soon_threadsafe(*callback)
        except RuntimeError:
            # 事件循环已经关闭
            pass

    threading.Thread(target=_reader, name="stdin-reader", daemon=True).start()
    return await future


class BrowserConfig:
    """浏览器运行参数"""

    def __init__(self, config_file: str = "config.yaml"):
        """
        初始化配置

        Args:
            config_file: 配置文件路径
        """
        self.config_file = Path(config_file)
        self._set_default_config()
        self._load_config()

    def _load_config(self) -> None:
        """加载配置文件，缺失的项使用默认值"""
        if not self.config_file.exists():
            print(f"[警告] 配置文件不存在: {self.config_file}，使用默认参数")
            return

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            print(f"[错误] 加载配置失败: {e}，使用默认参数")
            return

        source_config = config.get('source') or {}
        browser_config = config.get('browser') or {}

        self.base_url = source_config.get('base_url', self.base_url)
        self.section = str(source_config.get('section', self.section))
        self.timeout = source_config.get('timeout', self.timeout)
        self.show_limit = browser_config.get('show_limit', self.show_limit)

        print(f"[配置] 数据源: {self.base_url or '默认'} 栏目 {self.section}")
        print(f"[配置] 超时时间: {self.timeout}秒")
        print(f"[配置] 显示条数: {self.show_limit or '全部'}")

    def _set_default_config(self) -> None:
        """设置默认配置"""
        self.base_url: Optional[str] = None
        self.section = FudanJwcAnnouncementSource.DEFAULT_SECTION
        self.timeout = 20
        self.show_limit = 0

    def create_source(self) -> FudanJwcAnnouncementSource:
        return FudanJwcAnnouncementSource(
            base_url=self.base_url,
            section=self.section,
            timeout=self.timeout
        )


class AnnouncementBrowser:
    """终端公告列表"""

    def __init__(self, store: AnnouncementStore, show_limit: int = 0):
        """
        初始化浏览器

        Args:
            store: 本次会话的公告缓存
            show_limit: 每次最多显示多少条，0 表示全部
        """
        self.store = store
        self.show_limit = show_limit
        self.shown_count = 0

    async def load_more(self) -> List[Announcement]:
        """加载下一页，只输出新增的公告"""
        announcements = await self.store.get_cached_announcements()
        new_items = announcements[self.shown_count:]

        if not new_items:
            print("[完成] 没有更多公告了")
        else:
            self.print_announcements(new_items, start=self.shown_count + 1)

        self.shown_count = len(announcements)
        return announcements

    async def refresh(self) -> List[Announcement]:
        """清空缓存并重新加载第 1 页"""
        self.shown_count = 0
        announcements = await self.store.get_refreshed_announcements()

        if not announcements:
            print("[完成] 暂无公告")
        else:
            self.print_announcements(announcements, start=1)

        self.shown_count = len(announcements)
        return announcements

    async def handle_command(self, command: str) -> bool:
        """
        执行一条命令

        Args:
            command: 用户输入

        Returns:
            False 表示退出
        """
        command = command.strip().lower()

        if command in ('q', 'quit', 'exit'):
            return False

        try:
            if command in ('n', 'more', ''):
                await self.load_more()
            elif command in ('r', 'refresh'):
                await self.refresh()
            else:
                print(HELP_TEXT)
        except AnnouncementFetchError as e:
            print(f"[失败] {e}")

        return True

    def print_announcements(self, announcements: List[Announcement], start: int = 1) -> None:
        """输出公告列表"""
        if self.show_limit > 0:
            announcements = announcements[:self.show_limit]

        for idx, ann in enumerate(announcements, start):
            title = ann.title
            if len(title) > 60:
                title = title[:57] + "..."
            print(f"  {idx:3}. [{ann.date_str}] {title}")
            print(f"       {ann.url}")

        print(f"[汇总] 已加载 {len(self.store.announcements)} 条公告")

    async def run(self) -> None:
        """交互式主循环"""
        print("=" * 80)
        print("复旦教务处公告")
        print("=" * 80)
        print(HELP_TEXT)
        print()

        await self.handle_command('n')

        while True:
            try:
                command = await read_line("> ")
            except EOFError:
                break

            if not await self.handle_command(command):
                break

        print(f"[退出] 本次共加载 {len(self.store.announcements)} 条公告")

    async def run_pages(self, pages: int) -> None:
        """非交互模式：连续加载 pages 页后退出"""
        for _ in range(pages):
            await self.load_more()
            if self.store.exhausted:
                break


def main():
    """主入口"""
    parser = argparse.ArgumentParser(description='复旦教务处公告浏览')
    parser.add_argument('-c', '--config', default='config.yaml',
                        help='配置文件路径 (默认: config.yaml)')
    parser.add_argument('-p', '--pages', type=int, default=0,
                        help='加载指定页数后退出，不进入交互模式')

    args = parser.parse_args()

    config = BrowserConfig(args.config)
    source = config.create_source()
    store = AnnouncementStore(source)
    browser = AnnouncementBrowser(store, show_limit=config.show_limit)

    try:
        if args.pages > 0:
            asyncio.run(browser.run_pages(args.pages))
        else:
            asyncio.run(browser.run())
    except KeyboardInterrupt:
        print("\n\n[退出] 收到中断信号，正在退出...")
    finally:
        source.close()


if __name__ == "__main__":
    main()
