class RadioTError(RuntimeError):
    pass


class NetworkError(RadioTError):
    """API unreachable, non-2xx, or nothing usable in the body."""


class BridgeError(RadioTError):
    pass


class BridgeUnavailable(BridgeError):
    """The media player application could not be found or launched."""


class BridgeCommandFailed(BridgeError):
    pass


class NotFound(BridgeError):
    """The referenced track/stream no longer exists."""
