"""Operations beyond the binary codec: debug text and JSON/YAML trees."""

from fieldwalk.adapters.debug import DebugPrinter, format_value
from fieldwalk.adapters.json_tree import (
    JsonTreeReader,
    JsonTreeWriter,
    from_json,
    from_tree,
    from_yaml,
    to_json,
    to_tree,
    to_yaml,
)

__all__ = [
    "DebugPrinter",
    "JsonTreeReader",
    "JsonTreeWriter",
    "format_value",
    "from_json",
    "from_tree",
    "from_yaml",
    "to_json",
    "to_tree",
    "to_yaml",
]
