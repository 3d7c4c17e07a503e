from typing import Any, Dict, List
from urllib.parse import quote


def _quote(value: str) -> str:
    # Locator values live in a single path segment.
    return quote(str(value), safe="")


def locator_id(resource_id: str) -> str:
    """
    Builds an id locator for a path segment.
    Example: locator_id('Proj_Build') -> 'id:Proj_Build'
    """
    if not resource_id:
        raise ValueError("resource id must be provided.")
    return f"id:{_quote(resource_id)}"


def locator_name(name: str) -> str:
    """
    Builds a name locator for a path segment.
    Example: locator_name('My Project') -> 'name:My%20Project'
    """
    if not name:
        raise ValueError("name must be provided.")
    return f"name:{_quote(name)}"


def path_segment(value: str) -> str:
    return _quote(value)


def collection_items(payload: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """
    Extracts the item list from a TeamCity collection payload.
    Example: collection_items({'count': 1, 'step': [{...}]}, 'step') -> [{...}]

    TeamCity omits the item key entirely for empty collections.
    Raises ValueError if the key is present but not a list.
    """
    if not payload:
        return []
    items = payload.get(key, [])
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValueError(f"Expected '{key}' to be a list.")
    return [item for item in items if isinstance(item, dict)]


__all__ = [
    "locator_id",
    "locator_name",
    "path_segment",
    "collection_items",
]
