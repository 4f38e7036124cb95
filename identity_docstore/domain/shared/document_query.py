"""
Document query predicates.

Small predicate objects understood by every document session adapter.
Each predicate can be evaluated against a plain document dict (in-memory
adapter) and translated to a MongoDB filter (MongoDB adapter), so the
same query gives the same answer on both backends.

Matching is exact: string comparison is case-sensitive.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping


class DocumentQuery(ABC):
    """Predicate over stored documents."""

    @abstractmethod
    def matches(self, document: Mapping[str, Any]) -> bool:
        """Evaluate predicate against a stored document."""
        pass

    @abstractmethod
    def to_filter(self) -> Dict[str, Any]:
        """Translate predicate to a MongoDB filter document."""
        pass


@dataclass(frozen=True)
class MatchAll(DocumentQuery):
    """Matches every document of a collection."""

    def matches(self, document: Mapping[str, Any]) -> bool:
        return True

    def to_filter(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class FieldEquals(DocumentQuery):
    """
    Top-level field equality.

    Example:
        >>> FieldEquals("user_name", "alice").to_filter()
        {'user_name': 'alice'}
    """

    field: str
    value: Any

    def matches(self, document: Mapping[str, Any]) -> bool:
        return self.field in document and document[self.field] == self.value

    def to_filter(self) -> Dict[str, Any]:
        return {self.field: self.value}


@dataclass(frozen=True)
class ElementMatches(DocumentQuery):
    """
    At least one element of an array field matches all criteria.

    Example:
        >>> query = ElementMatches(
        ...     "logins", {"login_provider": "github", "provider_key": "42"}
        ... )
        >>> query.to_filter()
        {'logins': {'$elemMatch': {'login_provider': 'github', 'provider_key': '42'}}}
    """

    field: str
    criteria: Dict[str, Any]

    def matches(self, document: Mapping[str, Any]) -> bool:
        elements = document.get(self.field) or []
        for element in elements:
            if not isinstance(element, Mapping):
                continue
            if all(
                key in element and element[key] == value for key, value in self.criteria.items()
            ):
                return True
        return False

    def to_filter(self) -> Dict[str, Any]:
        return {self.field: {"$elemMatch": dict(self.criteria)}}
