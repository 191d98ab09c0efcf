"""Exceptions raised when talking to ADB devices, servers and emulators."""


class AdbError(Exception):
    """Base class of every error raised by this package."""


class AdbRequestFailed(AdbError):
    """An ADB request was refused or produced an unexpected answer."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"ADB request failed - {reason}")
        self.reason = reason


class UnknownResponseType(AdbError):
    """The peer answered with a response type that is not understood."""

    def __init__(self, response: str) -> None:
        super().__init__(f"Unknown response type {response}")
        self.response = response


class WrongResponseReceived(AdbError):
    """A message other than the expected one was received."""

    def __init__(self, received: str, expected: str) -> None:
        super().__init__(
            f"Wrong response command received: {received}. Expected {expected}"
        )
        self.received = received
        self.expected = expected


class UnknownDeviceState(AdbError):
    """The server reported a device state that is not understood."""

    def __init__(self, state: str) -> None:
        super().__init__(f"Unknown device state {state}")
        self.state = state


class RegexParsingError(AdbError):
    """A pattern matched but a required field was missing."""

    def __init__(self) -> None:
        super().__init__("Regex parsing error: missing field")


class ConversionError(AdbError):
    """A value could not be converted to or from its wire form."""

    def __init__(self) -> None:
        super().__init__("Conversion error")


class ShellNotSupported(AdbError):
    """The remote end does not support the shell feature."""

    def __init__(self) -> None:
        super().__init__("Remote ADB server does not support shell feature")


class DeviceNotFound(AdbError):
    """The requested device could not be found."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Device not found: {detail}")
        self.detail = detail


class DeviceNotPaired(AdbError):
    """The device must be paired before connecting over Wi-Fi."""

    def __init__(self) -> None:
        super().__init__("Device not paired before attempting to connect")


class FramebufferConversionError(AdbError):
    """Framebuffer content could not be turned into an image."""

    def __init__(self) -> None:
        super().__init__("Cannot convert framebuffer into image")


class UnimplementedFramebufferImageVersion(AdbError):
    """The device sent a framebuffer header version that is not supported."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Unimplemented framebuffer image version: {version}")
        self.version = version


class InvalidIntegrity(AdbError):
    """A received message failed its checksum."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Invalid integrity. Expected CRC32 {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class WrongFileExtension(AdbError):
    """The given path does not name an APK file."""

    def __init__(self, extension: str) -> None:
        super().__init__(f"wrong file extension: {extension}")
        self.extension = extension


class UpgradeError(AdbError):
    """The connection could not be upgraded from TCP to TLS."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"upgrade error: {detail}")
        self.detail = detail


class UnknownTransport(AdbError):
    """An unknown transport name was given."""

    def __init__(self, transport: str) -> None:
        super().__init__(f"unknown transport: {transport}")
        self.transport = transport