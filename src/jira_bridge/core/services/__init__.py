from jira_bridge.core.services.adf_primitives import AdfPrimitives
from jira_bridge.core.services.adf_text_extractor import (
    AdfTextExtractor,
    adf_to_plain_text,
    normalize_whitespace,
)
from jira_bridge.core.services.board_field_key_selector import (
    BoardFieldKeySelector,
    select_board_field_keys,
)
from jira_bridge.core.services.field_name_resolver import (
    FieldNameResolver,
    FieldNameSources,
    ResolvedName,
)
from jira_bridge.core.services.field_sanitizer import sanitize_value
from jira_bridge.core.services.flagged_detector import FlaggedByNameDetector, FlaggedDetector
from jira_bridge.core.services.input_field_coercer import coerce_fields
from jira_bridge.core.services.issue_view_builder import IssueViewBuilder, drop_null_fields
from jira_bridge.core.services.paginated_collector import collect_paged

__all__ = [
    "AdfPrimitives",
    "AdfTextExtractor",
    "BoardFieldKeySelector",
    "FieldNameResolver",
    "FieldNameSources",
    "FlaggedByNameDetector",
    "FlaggedDetector",
    "IssueViewBuilder",
    "ResolvedName",
    "adf_to_plain_text",
    "coerce_fields",
    "collect_paged",
    "drop_null_fields",
    "normalize_whitespace",
    "sanitize_value",
    "select_board_field_keys",
]
