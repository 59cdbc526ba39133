"""Normalization of tool input schemas discovered on tool-servers."""

from typing import Any, Dict, Set

import jsonref  # type: ignore

from ..logger import get_logger

logger = get_logger(__name__)

# Keys the completion endpoints either reject or do not need once refs are inlined.
_DROPPED_KEYS = frozenset({"$defs", "definitions", "$schema", "$id", "title"})


def _without_null_branch(node: Dict[str, Any]) -> Dict[str, Any]:
    """Collapse ``anyOf: [<schema>, {"type": "null"}]`` into ``<schema>``."""
    branches = node.get("anyOf")
    if not isinstance(branches, list):
        return node

    kept = [branch for branch in branches if not (isinstance(branch, dict) and branch.get("type") == "null")]
    if len(kept) != 1 or not isinstance(kept[0], dict):
        return node

    collapsed = {key: value for key, value in node.items() if key != "anyOf"}
    collapsed.update(kept[0])
    if "description" in node:
        collapsed["description"] = node["description"]
    return collapsed


def _clean(node: Any) -> Any:
    if isinstance(node, list):
        return [_clean(item) for item in node]
    if not isinstance(node, dict):
        return node

    cleaned: Dict[str, Any] = {}
    for key, value in _without_null_branch(node).items():
        if key in _DROPPED_KEYS:
            continue
        if key == "properties" and isinstance(value, dict):
            # Keys here are argument names, not schema keywords.
            cleaned[key] = {name: _clean(prop) for name, prop in value.items()}
        else:
            cleaned[key] = _clean(value)
    return cleaned


class SchemaValidator:
    """
    Turns the ``inputSchema`` a tool-server reports into a schema completion endpoints accept.
    """

    @staticmethod
    def has_recursive_refs(schema: Dict[str, Any]) -> bool:
        """
        Checks if the schema contains recursive references by traversing the graph.

        Args:
            schema: The JSON schema to check.

        Returns:
            True if a local ``$ref`` cycle is found.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> bool:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        return True
                    # e.g. #/$defs/MyModel
                    if isinstance(ref, str) and ref.startswith("#"):
                        def_name = ref.split("/")[-1]
                        if def_name in defs:
                            return check(defs[def_name], path | {ref})
                    return False
                return any(check(v, path) for v in node.values())
            if isinstance(node, list):
                return any(check(item, path) for item in node)
            return False

        return check(schema, set())

    @staticmethod
    def normalize_input_schema(schema: Any, tool_name: str = "") -> Dict[str, Any]:
        """Turn a discovered input schema into an object-shaped, ref-free schema.

        Local ``$ref``s are inlined, definition and metadata keys are dropped and
        nullable ``anyOf`` unions are collapsed to their single non-null branch.

        Args:
            schema: The raw ``inputSchema`` reported by the tool-server.
            tool_name: Name used in log messages.

        Returns:
            A JSON schema whose top-level ``type`` is ``object``.
        """
        if not isinstance(schema, dict) or not schema:
            return {"type": "object", "properties": {}}

        resolved: Dict[str, Any] = schema
        if SchemaValidator.has_recursive_refs(schema):
            # Inlining a cycle never terminates; keep the refs and only drop metadata.
            logger.warning("Input schema of tool '%s' is recursive; $refs left unresolved.", tool_name)
        else:
            try:
                # proxies=False ensures we get a plain dict back, not JsonRef objects
                resolved = jsonref.replace_refs(schema, proxies=False)
            except jsonref.JsonRefError as exc:
                logger.warning("Could not resolve $refs in schema of tool '%s': %s", tool_name, exc)

        normalized = _clean(resolved)
        normalized["type"] = "object"
        normalized.setdefault("properties", {})
        return normalized
