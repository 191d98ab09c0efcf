"""Emulator console commands and emulator addressing."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from enum import Enum

from .errors import DeviceNotFound

_EMULATOR_PATTERN = re.compile(r"emulator-(?P<port>\d+)")

DEFAULT_IP = "127.0.0.1"


class _Kind(Enum):
    AUTHENTICATE = "authenticate"
    SMS = "sms"
    ROTATE = "rotate"


@dataclass(frozen=True)
class EmulatorCommand:
    """A command for the emulator console; ``str()`` gives its wire line."""

    kind: _Kind
    args: tuple = ()

    @classmethod
    def authenticate(cls, token: str) -> "EmulatorCommand":
        """Authenticate to the console with ``token``."""
        return cls(_Kind.AUTHENTICATE, (token,))

    @classmethod
    def sms(cls, phone_number: str, content: str) -> "EmulatorCommand":
        """Deliver an SMS from ``phone_number`` to the emulator."""
        return cls(_Kind.SMS, (phone_number, content))

    @classmethod
    def rotate(cls) -> "EmulatorCommand":
        """Rotate the emulator screen."""
        return cls(_Kind.ROTATE)

    def __str__(self) -> str:
        if self.kind is _Kind.AUTHENTICATE:
            return f"auth {self.args[0]}\n"
        if self.kind is _Kind.SMS:
            return f"sms send {self.args[0]} {self.args[1]}\n"
        return "rotate\n"

    def skip_response_lines(self) -> int:
        """Number of answer lines to skip before the status line."""
        return 1 if self.kind is _Kind.AUTHENTICATE else 0


def emulator_address(identifier: str, ip_address: str | None = None) -> tuple[str, int]:
    """Return the console (ip, port) of the emulator named ``identifier``."""
    ip = ipaddress.IPv4Address(ip_address if ip_address is not None else DEFAULT_IP)
    match = _EMULATOR_PATTERN.fullmatch(identifier)
    if match is None:
        raise DeviceNotFound(f"Device {identifier} is likely not an emulator")
    digits = match.group("port")
    if not digits.isascii():
        raise ValueError(f"invalid port {digits!r}")
    port = int(digits)
    if port > 0xFFFF:
        raise ValueError(f"port {port} out of range")
    return str(ip), port