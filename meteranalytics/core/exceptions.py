class MAError(Exception): ...


class CanonError(MAError): ...


class IngestError(MAError): ...


class TransformError(MAError): ...


class ComparisonError(MAError): ...


class UnsupportedComparisonTypeError(ComparisonError, ValueError): ...


class DateRangeError(ComparisonError, ValueError): ...


def require(condition: bool, message: str, exc: type[MAError] = MAError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
