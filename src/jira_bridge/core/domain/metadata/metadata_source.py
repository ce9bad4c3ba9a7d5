from enum import StrEnum


class MetadataSource(StrEnum):
    """Where a field's display name was found."""

    NAMES_EXPAND = "names_expand"
    CREATE_META = "create_meta"
    EDIT_META = "edit_meta"
    FIELD_SCHEMA = "field_schema"


# First match wins.
NAME_PRECEDENCE: tuple[MetadataSource, ...] = (
    MetadataSource.NAMES_EXPAND,
    MetadataSource.CREATE_META,
    MetadataSource.EDIT_META,
    MetadataSource.FIELD_SCHEMA,
)
