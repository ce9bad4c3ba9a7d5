from typing import Any


class AdfPrimitives:
    """Builders for the few Atlassian Document Format nodes the write path needs."""

    @staticmethod
    def create_doc(content: list[dict[str, Any]]) -> dict[str, Any]:
        return {"type": "doc", "version": 1, "content": content}

    @staticmethod
    def create_paragraph(content: list[dict[str, Any]]) -> dict[str, Any]:
        return {"type": "paragraph", "content": content}

    @staticmethod
    def create_text(text: str) -> dict[str, Any]:
        return {"type": "text", "text": text}

    @classmethod
    def text_to_doc(cls, text: str) -> dict[str, Any]:
        """Wrap plain text into a single-paragraph document."""
        return cls.create_doc([cls.create_paragraph([cls.create_text(text)])])

    @staticmethod
    def is_document(value: Any) -> bool:
        """True when ``value`` looks like an ADF document root."""
        return (
            isinstance(value, dict)
            and value.get("type") == "doc"
            and isinstance(value.get("content"), list)
        )
