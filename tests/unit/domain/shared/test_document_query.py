"""Unit tests for document query predicates."""

import pytest

from identity_docstore.domain.shared.document_query import (
    DocumentQuery,
    ElementMatches,
    FieldEquals,
    MatchAll,
)

USER_DOCUMENT = {
    "_id": "users/1",
    "user_name": "alice",
    "logins": [
        {"login_provider": "github", "provider_key": "42"},
        {"login_provider": "google", "provider_key": "abc"},
    ],
}


class TestMatchAll:
    """Test MatchAll predicate."""

    def test_matches_any_document(self) -> None:
        assert MatchAll().matches(USER_DOCUMENT) is True
        assert MatchAll().matches({}) is True

    def test_filter_is_empty(self) -> None:
        assert MatchAll().to_filter() == {}


class TestFieldEquals:
    """Test FieldEquals predicate."""

    def test_matches_equal_value(self) -> None:
        assert FieldEquals("user_name", "alice").matches(USER_DOCUMENT) is True

    def test_comparison_is_case_sensitive(self) -> None:
        """Test that differently-cased values do not match."""
        assert FieldEquals("user_name", "Alice").matches(USER_DOCUMENT) is False

    def test_missing_field_does_not_match(self) -> None:
        assert FieldEquals("email", None).matches(USER_DOCUMENT) is False

    def test_to_filter(self) -> None:
        assert FieldEquals("user_name", "alice").to_filter() == {"user_name": "alice"}

    def test_is_hashable_value_object(self) -> None:
        assert FieldEquals("user_name", "alice") == FieldEquals("user_name", "alice")
        assert isinstance(FieldEquals("a", 1), DocumentQuery)


class TestElementMatches:
    """Test ElementMatches predicate over embedded arrays."""

    def test_matches_when_one_element_matches_all_criteria(self) -> None:
        query = ElementMatches("logins", {"login_provider": "google", "provider_key": "abc"})

        assert query.matches(USER_DOCUMENT) is True

    def test_criteria_must_hold_on_same_element(self) -> None:
        """Test provider from one element and key from another do not match."""
        query = ElementMatches("logins", {"login_provider": "github", "provider_key": "abc"})

        assert query.matches(USER_DOCUMENT) is False

    @pytest.mark.parametrize(
        "document",
        [
            {"_id": "users/2"},
            {"_id": "users/3", "logins": []},
            {"_id": "users/4", "logins": None},
            {"_id": "users/5", "logins": ["github|42"]},
        ],
    )
    def test_no_matching_element(self, document: dict) -> None:
        query = ElementMatches("logins", {"login_provider": "github", "provider_key": "42"})

        assert query.matches(document) is False

    def test_to_filter_uses_elem_match(self) -> None:
        query = ElementMatches("logins", {"login_provider": "github", "provider_key": "42"})

        assert query.to_filter() == {
            "logins": {"$elemMatch": {"login_provider": "github", "provider_key": "42"}}
        }
