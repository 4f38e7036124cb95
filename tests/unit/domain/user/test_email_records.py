"""Unit tests for email index records and key derivation."""

from datetime import datetime, timezone

import pytest

from identity_docstore.domain.user.core.entities.email_records import (
    EMAIL_CONFIRMATION_KEY_PREFIX,
    EMAIL_KEY_PREFIX,
    UserEmailConfirmation,
    UserEmailRecord,
    generate_email_confirmation_key,
    generate_email_key,
    normalize,
)


class TestNormalize:
    """Test input normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("alice@example.com", "alice@example.com"),
            ("Alice@Example.COM", "alice@example.com"),
            ("  alice@example.com\t", "alice@example.com"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize(raw) == expected


class TestEmailKey:
    """Test email index key derivation."""

    def test_key_has_collection_prefix(self) -> None:
        key = generate_email_key("alice@example.com")

        assert key.startswith(EMAIL_KEY_PREFIX)
        assert len(key) == len(EMAIL_KEY_PREFIX) + 64

    def test_equivalent_inputs_share_key(self) -> None:
        """Test case and surrounding whitespace do not change the key."""
        assert generate_email_key("Alice@Example.com") == generate_email_key(" alice@example.com ")

    def test_different_emails_have_different_keys(self) -> None:
        assert generate_email_key("alice@example.com") != generate_email_key("bob@example.com")

    def test_key_does_not_expose_email(self) -> None:
        assert "alice" not in generate_email_key("alice@example.com")


class TestEmailConfirmationKey:
    """Test confirmation key derivation."""

    def test_key_has_collection_prefix(self) -> None:
        key = generate_email_confirmation_key("alice", "alice@example.com")

        assert key.startswith(EMAIL_CONFIRMATION_KEY_PREFIX)

    def test_normalized_pair(self) -> None:
        assert generate_email_confirmation_key("Alice", "ALICE@example.com") == (
            generate_email_confirmation_key(" alice ", "alice@example.com")
        )

    def test_depends_on_user_name_and_email(self) -> None:
        base = generate_email_confirmation_key("alice", "alice@example.com")

        assert generate_email_confirmation_key("alice2", "alice@example.com") != base
        assert generate_email_confirmation_key("alice", "alice2@example.com") != base

    def test_pairs_do_not_collide_on_concatenation(self) -> None:
        """Test that shifting characters between the two parts changes the key."""
        assert generate_email_confirmation_key("ab", "c@x.io") != (
            generate_email_confirmation_key("a", "bc@x.io")
        )


class TestRecords:
    """Test record construction."""

    def test_email_record_key_derived_from_email(self) -> None:
        record = UserEmailRecord(email="Alice@Example.com", user_id="users/1")

        assert record.id == generate_email_key("alice@example.com")
        assert record.user_id == "users/1"
        assert UserEmailRecord.COLLECTION_NAME == "user_emails"

    def test_email_record_keeps_explicit_key(self) -> None:
        record = UserEmailRecord(email="a@b.io", user_id="users/1", id="user_emails/custom")

        assert record.id == "user_emails/custom"

    def test_confirmation_key_derived_from_pair(self) -> None:
        confirmed_on = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

        confirmation = UserEmailConfirmation(
            user_name="alice", email="alice@example.com", confirmed_on=confirmed_on
        )

        assert confirmation.id == generate_email_confirmation_key("alice", "alice@example.com")
        assert confirmation.confirmed_on == confirmed_on
        assert UserEmailConfirmation.COLLECTION_NAME == "user_email_confirmations"
