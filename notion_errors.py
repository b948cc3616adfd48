class NotionQAError(Exception):
    """Base class for every failure that ends a question/answer run."""


class ConfigError(NotionQAError):
    """Required settings are missing or the env file cannot be loaded."""


class TransportError(NotionQAError):
    """A request to Notion or OpenAI failed before a usable body came back."""


class DecodeError(NotionQAError):
    """A response body did not have the expected top-level shape."""


class EmptyContentError(NotionQAError):
    """The page was fetched but contained no text."""


class EmptyAnswerError(NotionQAError):
    """The completion response carried no choices."""
