"""Translation core: documents, conversation model, correlation, errors."""

from turnbridge.core.document import (
    ArrayDocument,
    BooleanDocument,
    Document,
    NullDocument,
    NumberDocument,
    ObjectDocument,
    StringDocument,
    from_generic,
    from_json,
    to_generic,
    to_json,
)
from turnbridge.core.error_mapper import ErrorMapper
from turnbridge.core.errors import (
    BackendError,
    CorrelationOrderError,
    EncodingError,
    ErrorKind,
    InvalidToolSchemaError,
    TranslationError,
    UnknownToolCallError,
)
from turnbridge.core.events import ResponseEventStream
from turnbridge.core.models import (
    AssistantMessage,
    ChatMessage,
    ConversationState,
    JsonBlock,
    ResponseEvent,
    TextBlock,
    TextDelta,
    ToolResult,
    ToolResultContentBlock,
    ToolResultStatus,
    ToolSpecification,
    ToolUse,
    ToolUseStart,
    ToolUseStop,
    UserMessage,
)
from turnbridge.core.registry import ToolCallRegistry

__all__ = [
    "ArrayDocument",
    "AssistantMessage",
    "BackendError",
    "BooleanDocument",
    "ChatMessage",
    "ConversationState",
    "CorrelationOrderError",
    "Document",
    "EncodingError",
    "ErrorKind",
    "ErrorMapper",
    "InvalidToolSchemaError",
    "JsonBlock",
    "NullDocument",
    "NumberDocument",
    "ObjectDocument",
    "ResponseEvent",
    "ResponseEventStream",
    "StringDocument",
    "TextBlock",
    "TextDelta",
    "ToolCallRegistry",
    "ToolResult",
    "ToolResultContentBlock",
    "ToolResultStatus",
    "ToolSpecification",
    "ToolUse",
    "ToolUseStart",
    "ToolUseStop",
    "TranslationError",
    "UnknownToolCallError",
    "UserMessage",
    "from_generic",
    "from_json",
    "to_generic",
    "to_json",
]
