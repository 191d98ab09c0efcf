"""ADB transport messages: commands, headers and payloads."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from .errors import ConversionError, WrongResponseReceived

AUTH_TOKEN = 1
AUTH_SIGNATURE = 2
AUTH_RSAPUBLICKEY = 3

_U32_MASK = 0xFFFFFFFF


class MessageCommand(IntEnum):
    """Command word of a transport message."""

    CNXN = 0x4E584E43
    CLSE = 0x45534C43
    AUTH = 0x48545541
    OPEN = 0x4E45504F
    WRITE = 0x45545257
    OKAY = 0x59414B4F
    STLS = 0x534C5453

    def __str__(self) -> str:
        return "WRTE" if self is MessageCommand.WRITE else self.name


class MessageSubcommand(IntEnum):
    """Command word of the file synchronisation protocol."""

    STAT = 0x54415453
    SEND = 0x444E4553
    RECV = 0x56434552
    QUIT = 0x54495551
    FAIL = 0x4C494146
    DONE = 0x454E4F44
    DATA = 0x41544144
    LIST = 0x5453494C

    def with_arg(self, arg: int) -> "SubcommandWithArg":
        """Pair this subcommand with its 32-bit argument."""
        return SubcommandWithArg(self, arg)


@dataclass(frozen=True)
class SubcommandWithArg:
    """A sync subcommand together with its argument."""

    subcommand: MessageSubcommand
    arg: int

    def to_bytes(self) -> bytes:
        """Encode as two little-endian 32-bit words."""
        try:
            return struct.pack("<II", self.subcommand, self.arg)
        except struct.error:
            raise ConversionError() from None


def compute_crc32(data: bytes) -> int:
    """ADB's payload checksum: the byte sum, truncated to 32 bits."""
    return sum(data) & _U32_MASK


def compute_magic(command: MessageCommand) -> int:
    """The magic word of a header: the command with all bits flipped."""
    return int(command) ^ _U32_MASK


_HEADER_FORMAT = "<6I"


@dataclass(frozen=True)
class MessageHeader:
    """The 24-byte header preceding every transport message."""

    command: MessageCommand
    arg0: int
    arg1: int
    data_length: int
    data_crc32: int
    magic: int

    SIZE = 24

    @classmethod
    def build(cls, command: MessageCommand, arg0: int, arg1: int, data: bytes) -> "MessageHeader":
        """Make the header for a message carrying ``data``."""
        return cls(
            command=command,
            arg0=arg0,
            arg1=arg1,
            data_length=len(data),
            data_crc32=compute_crc32(data),
            magic=compute_magic(command),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "MessageHeader":
        """Decode a header from exactly 24 bytes."""
        if len(data) != cls.SIZE:
            raise ConversionError()
        raw_command, *rest = struct.unpack(_HEADER_FORMAT, data)
        try:
            command = MessageCommand(raw_command)
        except ValueError:
            raise ConversionError() from None
        return cls(command, *rest)

    def to_bytes(self) -> bytes:
        """Encode the header as six little-endian 32-bit words."""
        try:
            return struct.pack(
                _HEADER_FORMAT,
                self.command,
                self.arg0,
                self.arg1,
                self.data_length,
                self.data_crc32,
                self.magic,
            )
        except struct.error:
            raise ConversionError() from None


class TransportMessage:
    """A header plus its payload."""

    __slots__ = ("header", "payload")

    def __init__(self, command: MessageCommand, arg0: int, arg1: int, data: bytes = b"") -> None:
        payload = bytes(data)
        self.header = MessageHeader.build(command, arg0, arg1, payload)
        self.payload = payload

    @classmethod
    def from_header_and_payload(cls, header: MessageHeader, payload: bytes) -> "TransportMessage":
        """Assemble a message from a received header and payload."""
        message = cls.__new__(cls)
        message.header = header
        message.payload = bytes(payload)
        return message

    @property
    def command(self) -> MessageCommand:
        return self.header.command

    def check_message_integrity(self) -> bool:
        """Whether the magic and checksum in the header match."""
        return (
            compute_magic(self.header.command) == self.header.magic
            and compute_crc32(self.payload) == self.header.data_crc32
        )

    def assert_command(self, expected: MessageCommand) -> None:
        """Raise WrongResponseReceived unless this message has ``expected``."""
        ours = self.header.command
        if ours != expected:
            raise WrongResponseReceived(str(ours), str(expected))

    def __repr__(self) -> str:
        return f"TransportMessage(header={self.header!r}, payload={self.payload!r})"