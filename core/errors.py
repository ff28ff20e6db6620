class AnnouncementFetchError(Exception):
    """获取公告失败（网络或解析）"""
    pass


class NetworkError(AnnouncementFetchError):
    def __init__(self, source: str, detail: str = ""):
        self.source = source
        self.message = f"[{source}] 网络请求失败: {detail}"
        super().__init__(self.message)


class DecodingError(AnnouncementFetchError):
    def __init__(self, source: str, detail: str = ""):
        self.source = source
        self.message = f"[{source}] 解析公告失败: {detail}"
        super().__init__(self.message)
