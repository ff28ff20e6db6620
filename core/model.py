from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Announcement:
    id: int
    title: str
    date: date
    url: str

    @property
    def date_str(self) -> str:
        return self.date.strftime("%Y-%m-%d")
