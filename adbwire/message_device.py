"""A device reached over a message transport, and writers built on it."""

from __future__ import annotations

import random
import struct
from typing import BinaryIO, Protocol, runtime_checkable

from .errors import AdbRequestFailed, ConversionError
from .message import MessageCommand, MessageSubcommand, TransportMessage
from .models import AdbStatResponse

BUFFER_SIZE = 65536

_U32 = struct.Struct("<I")


@runtime_checkable
class MessageTransport(Protocol):
    """Anything able to exchange whole transport messages with a device."""

    def read_message(self) -> TransportMessage:
        """Block until the next message arrives and return it."""
        ...

    def write_message(self, message: TransportMessage) -> None:
        """Send one message."""
        ...


def _read_u32(payload: bytes, position: int) -> int:
    if position < 0 or position + 4 > len(payload):
        raise ConversionError()
    return _U32.unpack_from(payload, position)[0]


class MessageDevice:
    """A device spoken to over any MessageTransport."""

    def __init__(self, transport: MessageTransport) -> None:
        self.transport = transport
        self._local_id: int | None = None
        self._remote_id: int | None = None

    @property
    def local_id(self) -> int:
        """Our id for the currently opened session."""
        if self._local_id is None:
            raise AdbRequestFailed("connection not opened, no local_id")
        return self._local_id

    @property
    def remote_id(self) -> int:
        """The device's id for the currently opened session."""
        if self._remote_id is None:
            raise AdbRequestFailed("connection not opened, no remote_id")
        return self._remote_id

    def _write(self, payload: bytes) -> TransportMessage:
        return TransportMessage(MessageCommand.WRITE, self.local_id, self.remote_id, payload)

    def recv_and_reply_okay(self) -> TransportMessage:
        """Receive a message and acknowledge it with OKAY."""
        message = self.transport.read_message()
        self.transport.write_message(
            TransportMessage(MessageCommand.OKAY, self.local_id, self.remote_id)
        )
        return message

    def send_and_expect_okay(self, message: TransportMessage) -> TransportMessage:
        """Send ``message`` and require an OKAY in return."""
        self.transport.write_message(message)
        response = self.transport.read_message()
        response.assert_command(MessageCommand.OKAY)
        return response

    def recv_file(self, output: BinaryIO) -> None:
        """Receive a file sent with DATA chunks and write it to ``output``."""
        pending: int | None = None
        while True:
            payload = self.recv_and_reply_okay().payload
            size = len(payload)
            position = 0
            while position != size:
                length, pending = pending, None
                if not length:
                    position += 4
                    pending = _read_u32(payload, position)
                    position += 4
                    continue
                remaining = size - position
                if length < remaining:
                    output.write(payload[position:position + length])
                    position += length
                else:
                    output.write(payload[position:])
                    pending = length - remaining
                    break
            if size < 8:
                raise ConversionError()
            if _read_u32(payload, size - 8) == MessageSubcommand.DONE:
                return

    def push_file(self, local_id: int, remote_id: int, reader: BinaryIO) -> None:
        """Send the content of ``reader`` as DATA chunks, then DONE."""

        def send_chunk(chunk: bytes) -> None:
            header = MessageSubcommand.DATA.with_arg(len(chunk)).to_bytes()
            self.send_and_expect_okay(
                TransportMessage(MessageCommand.WRITE, local_id, remote_id, header + chunk)
            )

        send_chunk(reader.read(BUFFER_SIZE))
        while chunk := reader.read(BUFFER_SIZE):
            send_chunk(chunk)

        # The file's modification time is not forwarded.
        done = MessageSubcommand.DONE.with_arg(0).to_bytes()
        self.send_and_expect_okay(
            TransportMessage(MessageCommand.WRITE, local_id, remote_id, done)
        )
        received = self.transport.read_message()
        if received.command != MessageCommand.WRITE:
            raise AdbRequestFailed(f"Wrong command received {received.command}")

    def begin_synchronization(self) -> None:
        """Open a file synchronisation session."""
        self.open_session(b"sync:\0")

    def stat_with_explicit_ids(self, remote_path: str) -> AdbStatResponse:
        """Stat ``remote_path`` inside an already opened sync session."""
        path = remote_path.encode()
        self.send_and_expect_okay(
            self._write(MessageSubcommand.STAT.with_arg(len(path)).to_bytes())
        )
        self.send_and_expect_okay(self._write(path))
        response = self.transport.read_message()
        # The first four bytes are the literal "STAT".
        return AdbStatResponse.from_bytes(response.payload[4:])

    def end_transaction(self) -> None:
        """Send QUIT and consume the closing message."""
        self.send_and_expect_okay(self._write(MessageSubcommand.QUIT.with_arg(0).to_bytes()))
        self.transport.read_message()

    def open_session(self, data: bytes) -> TransportMessage:
        """Open a stream for service ``data`` and remember both ids."""
        self.transport.write_message(
            TransportMessage(MessageCommand.OPEN, random.getrandbits(32), 0, data)
        )
        response = self.transport.read_message()
        self._local_id = response.header.arg1
        self._remote_id = response.header.arg0
        return response


class MessageWriter:
    """File-like writer sending WRTE messages, each acknowledged by OKAY."""

    def __init__(self, transport: MessageTransport, local_id: int, remote_id: int) -> None:
        self.transport = transport
        self.local_id = local_id
        self.remote_id = remote_id

    def write(self, data: bytes) -> int:
        """Send ``data`` and wait for the device's OKAY."""
        self.transport.write_message(
            TransportMessage(MessageCommand.WRITE, self.local_id, self.remote_id, data)
        )
        self.transport.read_message().assert_command(MessageCommand.OKAY)
        return len(data)

    def flush(self) -> None:
        """Nothing is buffered."""


class ShellMessageWriter:
    """File-like writer sending WRTE messages for an interactive shell."""

    def __init__(self, transport: MessageTransport, local_id: int, remote_id: int) -> None:
        self.transport = transport
        self.local_id = local_id
        self.remote_id = remote_id

    def write(self, data: bytes) -> int:
        """Send ``data`` without waiting for an answer."""
        self.transport.write_message(
            TransportMessage(MessageCommand.WRITE, self.local_id, self.remote_id, data)
        )
        return len(data)

    def flush(self) -> None:
        """Nothing is buffered."""