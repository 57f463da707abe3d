"""Field projection for response payloads.

Keeps only the requested fields of a map (or of every map in a
sequence). Dotted paths such as ``user.name`` pull a nested value out of
the source and rebuild the same nesting in the output.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Set

from .value_objects import UNDEFINED, ProjectionSpec


class PayloadProjector:
    """Stateless field selector."""

    def project(self, data: Any, fields: Optional[Iterable[str]]) -> Any:
        """Return ``data`` reduced to ``fields``.

        An empty or missing field list returns ``data`` itself, not a copy.
        Values that are neither maps nor sequences pass through.
        """
        paths = tuple(fields) if fields else ()
        if not paths:
            return data
        if isinstance(data, (list, tuple)):
            return [self.project_object(item, paths) for item in data]
        if isinstance(data, Mapping):
            return self.project_object(data, paths)
        return data

    def project_spec(self, data: Any, spec: ProjectionSpec) -> Any:
        return self.project(data, spec.fields)

    def project_object(self, obj: Any, fields: Iterable[str]) -> Any:
        if not isinstance(obj, Mapping):
            return obj

        result: Dict[str, Any] = {}
        created: Set[int] = {id(result)}
        for path in fields:
            if "." in path:
                value = self.get_nested(obj, path)
                if value is not UNDEFINED:
                    self._set_nested(result, path, value, created)
            elif path in obj:
                result[path] = obj[path]
        return result

    def remove_empty_values(self, data: Any) -> Any:
        """Drop nulls, UNDEFINED, empty maps and empty sequences, bottom-up.

        Empty strings and zero are kept. Input must be acyclic; pipelines
        run the sanitizer first.
        """
        if isinstance(data, (list, tuple)):
            cleaned_items = (self.remove_empty_values(item) for item in data)
            return [item for item in cleaned_items if not _is_empty(item)]
        if isinstance(data, Mapping):
            cleaned: Dict[Any, Any] = {}
            for key, value in data.items():
                cleaned_value = self.remove_empty_values(value)
                if not _is_empty(cleaned_value):
                    cleaned[key] = cleaned_value
            return cleaned
        return data

    @staticmethod
    def get_nested(obj: Any, path: str) -> Any:
        """Walk ``path`` segment by segment; UNDEFINED if any step is missing."""
        current = obj
        for segment in path.split("."):
            if isinstance(current, Mapping):
                if segment not in current:
                    return UNDEFINED
                current = current[segment]
            elif isinstance(current, (list, tuple)) and segment.isdigit():
                index = int(segment)
                if index >= len(current):
                    return UNDEFINED
                current = current[index]
            else:
                return UNDEFINED
            if current is UNDEFINED:
                return UNDEFINED
        return current

    @staticmethod
    def _set_nested(
        target: Dict[str, Any], path: str, value: Any, created: Set[int],
    ) -> None:
        *parents, leaf = path.split(".")
        current = target
        for segment in parents:
            child = current.get(segment)
            if not isinstance(child, Mapping):
                child = {}
            elif id(child) not in created:
                # Copied by reference from the source by a plain field;
                # never write into the caller's data.
                child = dict(child)
            created.add(id(child))
            current[segment] = child
            current = child
        current[leaf] = value


def _is_empty(value: Any) -> bool:
    if value is None or value is UNDEFINED:
        return True
    return isinstance(value, (Mapping, list, tuple)) and len(value) == 0
