"""Custom exceptions for rustydocs."""


class RustyDocsError(Exception):
    """Base exception for all rustydocs errors."""


class ConfigError(RustyDocsError):
    """Configuration-related errors."""


class ParserError(RustyDocsError):
    """Unreadable paths and malformed Rust sources."""


class SnapshotError(RustyDocsError):
    """Malformed or misplaced JSON snapshots of a parsed repository."""


class BudgetError(RustyDocsError):
    """A prompt or an embedding input does not fit the model's token limits."""


class LLMError(RustyDocsError):
    """Language model provider errors."""


class VectorStoreError(RustyDocsError):
    """Vector store errors."""


class ProviderNotAvailableError(LLMError):
    """Raised when an LLM provider's SDK is not installed."""

    def __init__(self, provider: str, package: str):
        super().__init__(
            f"Provider '{provider}' requires the '{package}' package. "
            f"Install it with: pip install {package}"
        )
