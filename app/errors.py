"""Application errors."""


class ExpressionError(Exception):
    """Base error for user-authored expressions."""

    def __init__(self, message: str = "Invalid expression", source: str | None = None):
        self.message = message
        self.source = source
        super().__init__(self.message)


class ExpressionSyntaxError(ExpressionError):
    """Expression text could not be parsed."""

    def __init__(self, message: str = "Syntax error", source: str | None = None, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message, source)


class EvaluationError(ExpressionError):
    """Expression failed while being evaluated."""


class InvalidIntervalError(ValueError):
    """Timeseries interval outside of the supported set."""

    def __init__(self, interval: str, valid: tuple[str, ...]):
        self.interval = interval
        self.message = f"Invalid interval: {interval}. Valid options are: {', '.join(valid)}"
        super().__init__(self.message)


class ColumnInUseError(Exception):
    """Column is referenced by saved filters and cannot be deleted."""

    def __init__(self, column_id: str, filter_names: list[str]):
        self.column_id = column_id
        self.filter_names = filter_names
        self.message = f"Cannot delete column. It is used by filters: {', '.join(filter_names)}"
        super().__init__(self.message)


class FetchError(Exception):
    """Upstream fetch failed for a single timeseries key."""

    def __init__(self, message: str = "Fetch failed"):
        self.message = message
        super().__init__(self.message)


class ReadOnlyError(RuntimeError):
    """Write attempted through a read-only repository."""
