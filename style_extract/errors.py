from typing import Optional


class StyleExtractError(Exception):
    pass


class FetchFailure(StyleExtractError):
    """Network or HTTP failure while retrieving a stylesheet, map or source file."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

    def __str__(self) -> str:
        message = super().__str__()
        if self.url:
            return f"{message} ({self.url})"
        return message


class ParseFailure(StyleExtractError):
    pass


class ElementNotFound(StyleExtractError):
    def __init__(self, message: str = "Element not found"):
        super().__init__(message)


class UnknownCommand(StyleExtractError):
    def __init__(self, command: str):
        super().__init__(f"Unknown command: {command}")
        self.command = command
