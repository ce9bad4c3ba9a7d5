from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PageCursor:
    offset: int
    page_size: int
    limit: int

    @classmethod
    def start(cls, limit: int, server_max_page_size: int) -> PageCursor:
        page_size = max(1, min(limit, server_max_page_size))
        return cls(offset=0, page_size=page_size, limit=limit)

    def advance(self) -> PageCursor:
        return replace(self, offset=self.offset + self.page_size)
