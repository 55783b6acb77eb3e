"""Exceptions raised by the Kakeibo classification and aggregation core."""


class KakeiboError(Exception):
    """Base class for all Kakeibo errors."""


class InvalidCategoryTypeError(KakeiboError, ValueError):
    """Raised when a value is outside the five fixed category types."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid category type: {value!r}")


class CategoryIntegrityError(KakeiboError):
    """Raised when category records do not form a valid parent/child tree.

    Attributes:
        category_id: ID of the category whose parent link is broken.
        parent_id: The parent ID that could not be resolved (None for cycles).
    """

    def __init__(self, message: str, category_id=None, parent_id=None):
        self.category_id = category_id
        self.parent_id = parent_id
        super().__init__(message)


class RecordValidationError(KakeiboError):
    """Raised when an input record file cannot be parsed."""

    def __init__(self, message: str, source=None, index=None):
        self.source = source
        self.index = index
        if source is not None and index is not None:
            message = f"{source}[{index}]: {message}"
        elif source is not None:
            message = f"{source}: {message}"
        super().__init__(message)
