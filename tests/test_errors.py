"""
Unit tests for the catalog error types.

Tests the base error class, the error families and the
recovery suggestion helper.
"""

import pytest
from catalog.errors import (
    CatalogError, ValidationError, DecodeError, PreconditionError, RenderError,
    ProductValidationError, FileTooLargeError, ImageDecodeError, InvalidImageFormatError,
    MissingLogoError, MissingCompanyNameError, NoEntriesError,
    create_error_recovery_suggestions
)


class TestCatalogError:
    """Test the base CatalogError class."""

    def test_basic_error_creation(self):
        """Test creating a basic error with message only."""
        error = CatalogError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details == {}
        assert error.suggestions == []

    def test_error_to_dict(self):
        """Test converting error to dictionary."""
        error = CatalogError("Test", details={'key': 'value'}, suggestions=['suggestion'])

        result = error.to_dict()

        assert result == {
            'error_type': 'CatalogError',
            'message': 'Test',
            'details': {'key': 'value'},
            'suggestions': ['suggestion']
        }


class TestErrorFamilies:
    """Test the error hierarchy."""

    @pytest.mark.parametrize('error,family', [
        (ProductValidationError(0, ['name']), ValidationError),
        (FileTooLargeError('a.png', 30.0, 20.0), ValidationError),
        (ImageDecodeError('a.png', 'bad'), DecodeError),
        (InvalidImageFormatError('a.txt', 'Extension: .txt'), DecodeError),
        (MissingLogoError(), PreconditionError),
        (MissingCompanyNameError(), PreconditionError),
        (NoEntriesError(), PreconditionError),
        (RenderError("boom"), CatalogError),
    ])
    def test_family(self, error, family):
        assert isinstance(error, family)
        assert isinstance(error, CatalogError)
        assert error.to_dict()['error_type'] == type(error).__name__

    def test_product_validation_error(self):
        error = ProductValidationError(2, ['price', 'images'])

        assert str(error) == "Each product needs a name, price and at least one image."
        assert error.details == {'product_index': 2, 'missing_fields': ['price', 'images']}
        assert len(error.suggestions) > 0

    def test_file_too_large_error(self):
        error = FileTooLargeError('huge.jpg', 25.0, 20.0)

        assert "File too large" in str(error)
        assert "25.0MB exceeds 20.0MB" in str(error)
        assert error.details['limit_mb'] == 20.0

    def test_decode_error_does_not_name_the_file(self):
        error = ImageDecodeError('secret-name.png', 'cannot identify image file')

        assert 'secret-name' not in str(error)
        assert error.details == {'filename': 'secret-name.png', 'reason': 'cannot identify image file'}

    def test_precondition_messages(self):
        assert MissingLogoError().message == "Company logo and name are required."
        assert MissingCompanyNameError().message == "Company logo and name are required."
        assert NoEntriesError().message == "Add some products first."


class TestRecoverySuggestions:
    """Test create_error_recovery_suggestions."""

    def test_uses_error_suggestions(self):
        suggestions = create_error_recovery_suggestions(NoEntriesError())

        assert suggestions == NoEntriesError().suggestions

    def test_adds_context_suggestions(self):
        suggestions = create_error_recovery_suggestions(
            MissingLogoError(), {'entry_count': 0, 'has_logo': False}
        )

        assert "Add products before downloading the catalog" in suggestions
        assert "Upload a logo on the first step" in suggestions

    def test_generic_fallback(self):
        suggestions = create_error_recovery_suggestions(ValueError("boom"))

        assert len(suggestions) == 2
