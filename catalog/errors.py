"""
Error types for the Product Catalog Builder.

Every failure the user can trigger is a CatalogError subclass carrying a
single user-facing message, optional details for the log and a list of
recovery suggestions.
"""

from typing import Dict, List, Any


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(self, message: str, details: Dict[str, Any] = None, suggestions: List[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
            'suggestions': self.suggestions
        }


class ValidationError(CatalogError):
    """Raised when user input validation fails."""
    pass


class DecodeError(CatalogError):
    """Raised when an uploaded image cannot be turned into a displayable form."""
    pass


class PreconditionError(CatalogError):
    """Raised when document generation is requested before its inputs exist."""
    pass


class RenderError(CatalogError):
    """Raised when the rendering sink fails to produce the document."""
    pass


class ProductValidationError(ValidationError):
    """Raised when a product lacks a name, a price or images."""

    def __init__(self, product_index: int, missing_fields: List[str]):
        super().__init__(
            "Each product needs a name, price and at least one image.",
            details={
                'product_index': product_index,
                'missing_fields': missing_fields
            },
            suggestions=[
                "Fill in the name and price of every product block",
                "Select at least one image for every product",
            ]
        )


class FileTooLargeError(ValidationError):
    """Raised when an uploaded file exceeds the size limit."""

    def __init__(self, filename: str, size_mb: float, limit_mb: float):
        super().__init__(
            f"File too large: {filename} ({size_mb:.1f}MB exceeds {limit_mb:.1f}MB limit)",
            details={
                'filename': filename,
                'size_mb': size_mb,
                'limit_mb': limit_mb
            },
            suggestions=[
                f"Reduce file size to under {limit_mb:.1f}MB",
                "Export the image at a lower resolution",
            ]
        )


class ImageDecodeError(DecodeError):
    """Raised when an image in a batch fails to decode.

    The message does not name the file. The filename is kept in ``details``
    for the log.
    """

    def __init__(self, filename: str = None, reason: str = None):
        super().__init__(
            "Couldn't read an image – please try different files.",
            details={
                'filename': filename,
                'reason': reason
            },
            suggestions=[
                "Use PNG or JPEG images",
                "Ensure the files are not corrupted",
            ]
        )


class InvalidImageFormatError(DecodeError):
    """Raised when an uploaded file does not have an image extension."""

    def __init__(self, filename: str, detected_type: str = None):
        super().__init__(
            f"Invalid image format: {filename}",
            details={
                'filename': filename,
                'detected_type': detected_type
            },
            suggestions=[
                "Use JPG or PNG images",
                "Convert the file to a supported format",
            ]
        )


class MissingLogoError(PreconditionError):
    """Raised when generation is requested without a company logo."""

    def __init__(self):
        super().__init__(
            "Company logo and name are required.",
            details={'missing': 'logo'},
            suggestions=["Upload a company logo first"]
        )


class MissingCompanyNameError(PreconditionError):
    """Raised when generation is requested without a company name."""

    def __init__(self):
        super().__init__(
            "Company logo and name are required.",
            details={'missing': 'company_name'},
            suggestions=["Enter your company name first"]
        )


class NoEntriesError(PreconditionError):
    """Raised when generation is requested with no catalog entries."""

    def __init__(self):
        super().__init__(
            "Add some products first.",
            details={'entry_count': 0},
            suggestions=["Submit at least one product with an image"]
        )


def create_error_recovery_suggestions(error: Exception, context: Dict[str, Any] = None) -> List[str]:
    """Generate contextual recovery suggestions for any error."""
    suggestions = []

    if isinstance(error, CatalogError):
        suggestions.extend(error.suggestions)

    if context:
        if context.get('entry_count') == 0:
            suggestions.append("Add products before downloading the catalog")

        if not context.get('has_logo', True):
            suggestions.append("Upload a logo on the first step")

    # Generic fallback suggestions
    if not suggestions:
        suggestions = [
            "Try the action again",
            "Reload the page and start a new catalog",
        ]

    return suggestions
