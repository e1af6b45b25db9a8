"""Exception types for newsletter detection."""


class UnsubscriberError(Exception):
    """Base class for detection errors."""


class DecodeError(UnsubscriberError):
    """A body payload is not valid base64 or not valid UTF-8."""

    def __init__(self, mime_type: str, reason: str) -> None:
        self.mime_type = mime_type
        self.reason = reason
        super().__init__(f"cannot decode {mime_type} part: {reason}")


class MalformedHeaderError(UnsubscriberError):
    """List-Unsubscribe holds neither a web URL nor a mailto target."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"unrecognised List-Unsubscribe value: {value!r}")
