"""SQL fragments for JSON access and modification in several relational engines."""

from __future__ import annotations

import enum
from typing import Iterable


class RDBMS(enum.Enum):
    """Relational engine whose JSON dialect is produced."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"

    def _pick(self, postgres: str, mysql: str, sqlite: str) -> str:
        if self is RDBMS.POSTGRES:
            return postgres
        if self is RDBMS.MYSQL:
            return mysql
        return sqlite

    def extract(self, field: str) -> str:
        """Extract a JSON field value."""
        return self._pick(
            f"->> '{field}'",
            f"->>'$.{field}'",
            f"json_extract(data, '$.{field}')",
        )

    def extract_text(self, field: str) -> str:
        """Extract a JSON field value as text."""
        return self._pick(
            f"->>'{field}' ",
            f"->>'$.{field}'",
            f"json_extract(data, '$.{field}')",
        )

    def extract_int(self, field: str) -> str:
        """Extract a JSON field value as an integer."""
        return self._pick(
            f"->>'{field}' ",
            f"->>'$.{field}'",
            f"CAST(json_extract(data, '$.{field}') AS INTEGER)",
        )

    def extract_path(self, path: str) -> str:
        """Extract the JSON value at ``path``."""
        return self._pick(
            f"#>'{path}'",
            f"->>'$.{path}'",
            f"json_extract(data, '$.{path}')",
        )

    def exists(self, field: str) -> str:
        """Test whether a JSON field exists."""
        return self._pick(
            f"? '{field}'",
            f"JSON_CONTAINS_PATH(data, 'one', '$.{field}')",
            f"json_type(data, '$.{field}') IS NOT NULL",
        )

    def exists_path(self, path: str) -> str:
        """Test whether a JSON path exists."""
        return self._pick(
            f"?& array[{path}]",
            f"JSON_CONTAINS_PATH(data, 'one', '$.{path}')",
            f"json_type(data, '$.{path}') IS NOT NULL",
        )

    def keys(self) -> str:
        """Expression listing the keys of a JSON object."""
        return self._pick("json_object_keys", "JSON_KEYS", "json_group_array(json_each.key)")

    def array_length(self) -> str:
        """Expression giving the length of a JSON array."""
        return self._pick("json_array_length", "JSON_LENGTH", "json_array_length(data)")

    def build_object(self, pairs: Iterable[tuple[str, str]]) -> str:
        """Build a JSON object from key/expression pairs."""
        body = ", ".join(f"'{key}', {value}" for key, value in pairs)
        name = self._pick("json_build_object", "JSON_OBJECT", "json_object")
        return f"{name}({body})"

    def build_array(self, elements: Iterable[str]) -> str:
        """Build a JSON array from expressions."""
        body = ", ".join(elements)
        name = self._pick("json_build_array", "JSON_ARRAY", "json_array")
        return f"{name}({body})"

    def set(self, field: str, value: str) -> str:
        """Set a JSON field value."""
        return self._pick(
            f"jsonb_set(data, '{{{field}}}', '{value}')",
            f"JSON_SET(data, '$.{field}', '{value}')",
            f"json_set(data, '$.{field}', '{value}')",
        )

    def set_path(self, path: str, value: str) -> str:
        """Set the JSON value at ``path``."""
        return self._pick(
            f"jsonb_set(data, '{{{path}}}', '{value}')",
            f"JSON_SET(data, '$.{path}', '{value}')",
            f"json_set(data, '$.{path}', '{value}')",
        )

    def delete(self, field: str) -> str:
        """Delete a JSON field."""
        return self._pick(
            f"data - '{field}'",
            f"JSON_REMOVE(data, '$.{field}')",
            f"json_remove(data, '$.{field}')",
        )

    def delete_path(self, path: str) -> str:
        """Delete the JSON value at ``path``."""
        return self._pick(
            f"data #- '{{{path}}}'",
            f"JSON_REMOVE(data, '$.{path}')",
            f"json_remove(data, '$.{path}')",
        )

    def merge(self, other: str) -> str:
        """Merge another JSON object into the data."""
        return self._pick(
            f"data || '{other}'",
            f"JSON_MERGE_PATCH(data, '{other}')",
            f"json_patch(data, '{other}')",
        )

    def append(self, element: str) -> str:
        """Append an element to a JSON array."""
        return self._pick(
            f"jsonb_insert(data, '{{-1}}', '{element}')",
            f"JSON_ARRAY_APPEND(data, '$', '{element}')",
            f"json_insert(data, '$[#]', '{element}')",
        )

    def remove(self, index: int) -> str:
        """Remove the array element at ``index``."""
        return self._pick(
            f"data - '{index}'",
            f"JSON_REMOVE(data, '$[{index}]')",
            f"json_remove(data, '$[{index}]')",
        )

    def update(self, index: int, value: str) -> str:
        """Replace the array element at ``index``."""
        return self._pick(
            f"jsonb_set(data, '{{{index}}}'::text[], '{value}')",
            f"JSON_SET(data, '$[{index}]', '{value}')",
            f"json_set(data, '$[{index}]', '{value}')",
        )