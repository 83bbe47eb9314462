class ResolverError(Exception):
    """Base class for errors raised by the resolution engine."""


class ParseError(ResolverError, ValueError):
    """The reference is not a recognised reel/post URL. Raised before any network call."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Invalid Instagram reel URL: {reference!r}")


class ChainConfigurationError(ResolverError):
    """The strategy chain was configured with no usable strategies."""
