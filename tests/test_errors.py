"""Tests for deckshare error classes."""

import pytest

from deckshare.errors import (
    AuthorizationError,
    CardListInputError,
    CardNotFoundError,
    Error,
    NotFoundError,
    ValidationError,
)


class TestBaseError:
    """Test cases for the base Error class."""

    def test_error_base_class(self):
        """Test that Error is a proper exception subclass."""
        error = Error("Test message")
        assert isinstance(error, Exception)
        assert str(error) == "Test message"

    @pytest.mark.parametrize(
        "error",
        [
            AuthorizationError(),
            ValidationError("invalid"),
            NotFoundError("Decklist", 1),
            CardListInputError(["x"]),
            CardNotFoundError(["01001"]),
        ],
    )
    def test_all_errors_share_the_base(self, error):
        assert isinstance(error, Error)


class TestAuthorizationError:
    def test_default_message(self):
        assert str(AuthorizationError()) == "Access denied"

    def test_custom_message(self):
        error = AuthorizationError("Cannot delete this decklist.")
        assert error.message == "Cannot delete this decklist."
        assert str(error) == "Cannot delete this decklist."


class TestValidationError:
    def test_unreleased(self):
        error = ValidationError("unreleased")
        assert error.reason == "unreleased"
        assert error.detail is None
        assert "not released" in str(error)

    def test_invalid_carries_problem(self):
        error = ValidationError("invalid", "too_few_plots")
        assert error.detail == "too_few_plots"
        assert str(error).endswith("(too_few_plots)")

    def test_unknown_reason_is_shown_as_is(self):
        assert str(ValidationError("banned")) == "banned"


class TestNotFoundError:
    def test_message(self):
        error = NotFoundError("Decklist", 12)
        assert error.entity == "Decklist"
        assert error.identifier == 12
        assert str(error) == "Decklist '12' not found"


class TestCardListInputError:
    """Test cases for CardListInputError."""

    def test_cardlist_input_error_lines(self):
        line_errors = ["4", "abc", "invalid line"]
        error = CardListInputError(line_errors)

        assert error.line_errors == line_errors
        error_str = str(error)
        assert "Error parsing provided card list" in error_str
        assert "<quantity> <card code>" in error_str
        for line in line_errors:
            assert line in error_str


class TestCardNotFoundError:
    def test_lists_codes(self):
        error = CardNotFoundError(["01001", "09999"])
        assert error.codes == ["01001", "09999"]
        assert str(error) == "Unknown card code(s): 01001, 09999"
