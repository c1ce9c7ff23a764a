"""Custom exceptions for the zepress content pipeline."""


class ZepressError(Exception):
    """Base exception for pipeline errors."""

    def __init__(self, message: str, plugin: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.plugin = plugin
        self.cause = cause

    def __str__(self) -> str:
        msg = super().__str__()
        if self.plugin:
            msg = f"{msg} (Plugin: {self.plugin})"
        if self.cause:
            msg = f"{msg} (Caused by: {self.cause})"
        return msg


class PluginExecutionError(ZepressError):
    """Exception raised when a plugin fails while processing a document."""

    pass


class CssResolutionError(ZepressError):
    """Exception raised when a stylesheet or style attribute cannot be parsed."""

    pass


class HighlightError(ZepressError):
    """Exception raised when the highlighter cannot render a code block."""

    pass


class ConfigurationError(ZepressError):
    """Exception raised for configuration-related errors."""

    pass


class RenderError(ZepressError):
    """Exception raised when an out-of-band render job fails."""

    pass
