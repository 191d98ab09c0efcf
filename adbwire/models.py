"""Value types exchanged with ADB servers and devices."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, ClassVar

from .errors import ConversionError, FramebufferConversionError, UnknownResponseType


class AdbRequestStatus(Enum):
    """Status word answered by an ADB server."""

    OKAY = "okay"
    FAIL = "fail"

    @classmethod
    def parse(cls, text: str) -> "AdbRequestStatus":
        """Parse a status word, ignoring ASCII case."""
        lowered = "".join(c.lower() if c.isascii() else c for c in text)
        try:
            return cls(lowered)
        except ValueError:
            raise UnknownResponseType(lowered) from None


class RebootType(Enum):
    """Mode a device reboots into."""

    SYSTEM = ""
    BOOTLOADER = "bootloader"
    RECOVERY = "recovery"
    SIDELOAD = "sideload"
    SIDELOAD_AUTO_REBOOT = "sideload-auto-reboot"
    FASTBOOT = "fastboot"

    def __str__(self) -> str:
        return self.value


class HostFeature(Enum):
    """Feature advertised by an ADB host."""

    SHELL_V2 = "shell_v2"
    CMD = "cmd"

    @classmethod
    def from_bytes(cls, value: bytes) -> "HostFeature":
        """Parse a feature from its wire name."""
        try:
            return cls(bytes(value).decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            raise ValueError(f"Unknown value {value!r}") from None

    def __str__(self) -> str:
        return _HOST_FEATURE_NAMES[self]


_HOST_FEATURE_NAMES = {HostFeature.SHELL_V2: "ShellV2", HostFeature.CMD: "Cmd"}


class SyncCommand(Enum):
    """Commands of the file synchronisation protocol."""

    LIST = "LIST"
    RECV = "RECV"
    SEND = "SEND"
    STAT = "STAT"

    def __str__(self) -> str:
        return self.value


class ServerCommandKind(Enum):
    """Every request that can be sent to an ADB server."""

    VERSION = "version"
    KILL = "kill"
    DEVICES = "devices"
    DEVICES_LONG = "devices_long"
    TRACK_DEVICES = "track_devices"
    HOST_FEATURES = "host_features"
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    PAIR = "pair"
    TRANSPORT_ANY = "transport_any"
    TRANSPORT_SERIAL = "transport_serial"
    MDNS_CHECK = "mdns_check"
    MDNS_SERVICES = "mdns_services"
    SERVER_STATUS = "server_status"
    RECONNECT_OFFLINE = "reconnect_offline"
    UNINSTALL = "uninstall"
    INSTALL = "install"
    WAIT_FOR_DEVICE = "wait_for_device"
    SHELL_COMMAND = "shell_command"
    SHELL = "shell"
    FRAMEBUFFER = "framebuffer"
    SYNC = "sync"
    REBOOT = "reboot"
    FORWARD = "forward"
    FORWARD_REMOVE_ALL = "forward_remove_all"
    REVERSE = "reverse"
    REVERSE_REMOVE_ALL = "reverse_remove_all"
    RECONNECT = "reconnect"
    TCPIP = "tcpip"
    USB = "usb"


def _address(value: Any) -> str:
    if isinstance(value, tuple):
        host, port = value
        return f"{host}:{port}"
    return str(value)


_K = ServerCommandKind

_FORMATTERS: dict[ServerCommandKind, Callable[[tuple], str]] = {
    _K.VERSION: lambda a: "host:version",
    _K.KILL: lambda a: "host:kill",
    _K.DEVICES: lambda a: "host:devices",
    _K.DEVICES_LONG: lambda a: "host:devices-l",
    _K.SYNC: lambda a: "sync:",
    _K.TRACK_DEVICES: lambda a: "host:track-devices",
    _K.TRANSPORT_ANY: lambda a: "host:transport-any",
    _K.TRANSPORT_SERIAL: lambda a: f"host:transport:{a[0]}",
    _K.HOST_FEATURES: lambda a: "host:features",
    _K.REBOOT: lambda a: f"reboot:{a[0]}",
    _K.CONNECT: lambda a: f"host:connect:{_address(a[0])}",
    _K.DISCONNECT: lambda a: f"host:disconnect:{_address(a[0])}",
    _K.PAIR: lambda a: f"host:pair:{a[1]}:{_address(a[0])}",
    _K.FRAMEBUFFER: lambda a: "framebuffer:",
    _K.FORWARD: lambda a: f"host:forward:{a[1]};{a[0]}",
    _K.FORWARD_REMOVE_ALL: lambda a: "host:killforward-all",
    _K.REVERSE: lambda a: f"reverse:forward:{a[0]};{a[1]}",
    _K.REVERSE_REMOVE_ALL: lambda a: "reverse:killforward-all",
    _K.MDNS_CHECK: lambda a: "host:mdns:check",
    _K.MDNS_SERVICES: lambda a: "host:mdns:services",
    _K.SERVER_STATUS: lambda a: "host:server-status",
    _K.RECONNECT: lambda a: "reconnect",
    _K.RECONNECT_OFFLINE: lambda a: "host:reconnect-offline",
    _K.TCPIP: lambda a: f"tcpip:{a[0]}",
    _K.USB: lambda a: "usb:",
    _K.INSTALL: lambda a: f"exec:cmd package 'install' -S {a[0]}",
    _K.UNINSTALL: lambda a: f"exec:cmd package 'uninstall' {a[0]}",
    _K.WAIT_FOR_DEVICE: lambda a: f"host:wait-for-{a[1]}-{a[0]}",
}

_ARITY = {
    _K.CONNECT: 1,
    _K.DISCONNECT: 1,
    _K.PAIR: 2,
    _K.TRANSPORT_SERIAL: 1,
    _K.UNINSTALL: 1,
    _K.INSTALL: 1,
    _K.WAIT_FOR_DEVICE: 2,
    _K.SHELL_COMMAND: 1,
    _K.REBOOT: 1,
    _K.FORWARD: 2,
    _K.REVERSE: 2,
    _K.TCPIP: 1,
}


@dataclass(frozen=True)
class AdbServerCommand:
    """A request to an ADB server; ``str()`` gives its wire text.

    Arguments by kind: CONNECT/DISCONNECT (address), PAIR (address, code),
    TRANSPORT_SERIAL (serial), UNINSTALL (package), INSTALL (size),
    WAIT_FOR_DEVICE (state, transport), SHELL_COMMAND (command),
    REBOOT (reboot type), FORWARD/REVERSE (remote, local), TCPIP (port).
    """

    kind: ServerCommandKind
    args: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        expected = _ARITY.get(self.kind, 0)
        if len(self.args) != expected:
            raise ValueError(
                f"{self.kind.name} takes {expected} argument(s), got {len(self.args)}"
            )

    def __str__(self) -> str:
        if self.kind in (_K.SHELL, _K.SHELL_COMMAND):
            command = self.args[0] if self.args else ""
            term = os.environ.get("TERM")
            prefix = f"shell,TERM={term},raw:" if term is not None else "shell,raw:"
            return f"{prefix}{command}"
        return _FORMATTERS[self.kind](self.args)


@dataclass(frozen=True)
class AdbStatResponse:
    """Answer to a ``stat`` request."""

    file_perm: int
    file_size: int
    mod_time: int

    SIZE: ClassVar[int] = 12

    @classmethod
    def from_bytes(cls, data: bytes) -> "AdbStatResponse":
        """Decode the 12 little-endian bytes of a stat answer."""
        if len(data) < cls.SIZE:
            raise ConversionError()
        return cls(*struct.unpack_from("<3I", data))

    def __str__(self) -> str:
        stamp = datetime.fromtimestamp(self.mod_time, tz=timezone.utc)
        return (
            f"File permissions: {self.file_perm}\n"
            f"File size: {self.file_size} bytes\n"
            f"Modification time: {stamp:%Y-%m-%d %H:%M:%S}.000000000 UTC"
        )


def _unpack_u32_fields(cls: type, data: bytes) -> Any:
    count = len(fields(cls))
    if len(data) < count * 4:
        raise FramebufferConversionError()
    return cls(*struct.unpack_from(f"<{count}I", data))


@dataclass(frozen=True)
class FrameBufferInfoV1:
    """Framebuffer header, version 1 (RGBA_8888)."""

    bpp: int
    size: int
    width: int
    height: int
    red_offset: int
    red_length: int
    blue_offset: int
    blue_length: int
    green_offset: int
    green_length: int
    alpha_offset: int
    alpha_length: int

    SIZE: ClassVar[int] = 48

    @classmethod
    def from_bytes(cls, data: bytes) -> "FrameBufferInfoV1":
        """Decode the header from its leading little-endian bytes."""
        return _unpack_u32_fields(cls, data)


@dataclass(frozen=True)
class FrameBufferInfoV2:
    """Framebuffer header, version 2 (RGBX_8888)."""

    bpp: int
    color_space: int
    size: int
    width: int
    height: int
    red_offset: int
    red_length: int
    blue_offset: int
    blue_length: int
    green_offset: int
    green_length: int
    alpha_offset: int
    alpha_length: int

    SIZE: ClassVar[int] = 52

    @classmethod
    def from_bytes(cls, data: bytes) -> "FrameBufferInfoV2":
        """Decode the header from its leading little-endian bytes."""
        return _unpack_u32_fields(cls, data)