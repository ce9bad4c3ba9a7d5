from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FieldDefinition:
    id: str
    name: str
    required: bool = False
    schema: dict[str, Any] = field(default_factory=dict)
    allowed_values: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "required": self.required,
            "schema": self.schema,
            "allowed_values": self.allowed_values,
        }
