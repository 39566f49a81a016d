class RouterbotError(Exception):
    """Base class for errors raised across routerbot modules.

    ``code`` is machine readable, ``http_status`` is what the API layer
    would answer with if it mapped the error directly.
    """

    def __init__(self, code: str, message: str, http_status: int = 500):
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class ConfigError(RouterbotError):
    """Required configuration is missing or invalid."""


class StoreError(RouterbotError):
    """The conversation / document backend rejected or failed a request."""


class UpstreamError(RouterbotError):
    """The LLM provider call failed."""
