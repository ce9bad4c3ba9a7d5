from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class IssueField:
    name: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}
