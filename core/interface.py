from abc import ABC, abstractmethod
from typing import Sequence
from core.model import Announcement


class AnnouncementSource(ABC):
    name: str

    @abstractmethod
    def fetch_page(self, page: int) -> Sequence[Announcement]:
        """返回第 page 页（从 1 开始）的公告，空列表表示后面没有更多了

        失败时抛出 NetworkError 或 DecodingError
        """
        ...
