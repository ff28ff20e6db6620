"""
快速测试脚本 - 拉取一次第 1 页

用于测试数据源配置是否正确，不会进入交互模式。
"""

import asyncio

from core.store import AnnouncementStore
from main import BrowserConfig, AnnouncementBrowser


async def check(browser: AnnouncementBrowser) -> None:
    announcements = await browser.refresh()
    print(f"\n📊 第 1 页共 {len(announcements)} 条公告")
    if browser.store.exhausted:
        print("⚠️  第 1 页为空，请检查栏目编号是否正确")


def main():
    """单次运行测试"""
    config = BrowserConfig()
    source = config.create_source()
    print(f"✅ 列表地址: {source.build_page_url(1)}")
    print()

    browser = AnnouncementBrowser(AnnouncementStore(source), show_limit=config.show_limit)
    try:
        asyncio.run(check(browser))
    finally:
        source.close()

    print()
    print("💡 提示:")
    print("  - 如需交互浏览，执行: python main.py")
    print("  - 修改配置: 编辑 config.yaml")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n⚠️  已中断")
    except Exception as e:
        print(f"\n\n❌ 错误: {e}")
        import traceback
        traceback.print_exc()
