"""Exception types shared by the search, summarization and HTTP layers."""


class NewsDigestError(RuntimeError):
    """Base class for errors raised by this package."""


class ProviderError(NewsDigestError):
    """An external search or language-model call failed or returned junk."""


class ConfigurationError(NewsDigestError):
    """A required credential or setting is missing; the process cannot serve."""
