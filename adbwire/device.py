"""High level operations on a device reached over a message transport."""

from __future__ import annotations

import io
import logging
import os
import struct
import threading
from typing import BinaryIO, Sequence

from PIL import Image

from .errors import (
    AdbError,
    AdbRequestFailed,
    ConversionError,
    FramebufferConversionError,
    ShellNotSupported,
    UnimplementedFramebufferImageVersion,
    UnknownResponseType,
)
from .message import MessageCommand, MessageSubcommand, TransportMessage
from .message_device import BUFFER_SIZE, MessageDevice, ShellMessageWriter
from .models import AdbStatResponse, FrameBufferInfoV1, FrameBufferInfoV2, RebootType

log = logging.getLogger(__name__)

_FRAMEBUFFER_VERSIONS = {
    1: FrameBufferInfoV1,  # RGBA_8888
    2: FrameBufferInfoV2,  # RGBX_8888
}

_SUCCESS = b"Success\n"


class AdbDevice(MessageDevice):
    """Shell, file transfer, reboot and screen capture on a device."""

    def shell_command(self, command: Sequence[str], output: BinaryIO) -> None:
        """Run ``command`` in a shell and write what it prints to ``output``."""
        response = self.open_session(f"shell:{' '.join(command)}\0".encode())
        if response.command != MessageCommand.OKAY:
            raise AdbRequestFailed(f"wrong command {response.command}")

        while True:
            message = self.transport.read_message()
            if message.command != MessageCommand.WRITE:
                break
            output.write(message.payload)

    def shell(self, reader: BinaryIO, writer: BinaryIO) -> None:
        """Start an interactive shell: ``reader`` feeds it, ``writer`` gets its output."""
        self.open_session(b"shell:\0")
        transport = self.transport
        local_id = self.local_id
        remote_id = self.remote_id

        def receive() -> None:
            try:
                while True:
                    message = transport.read_message()
                    transport.write_message(
                        TransportMessage(MessageCommand.OKAY, local_id, remote_id)
                    )
                    if message.command == MessageCommand.WRITE:
                        writer.write(message.payload)
                        flush = getattr(writer, "flush", None)
                        if flush is not None:
                            flush()
                    elif message.command != MessageCommand.OKAY:
                        raise ShellNotSupported()
            except (AdbError, OSError) as error:
                log.debug("shell reader stopped: %s", error)

        threading.Thread(target=receive, name="adb-shell-reader", daemon=True).start()

        shell_writer = ShellMessageWriter(transport, local_id, remote_id)
        try:
            while chunk := reader.read(BUFFER_SIZE):
                shell_writer.write(chunk)
        except BrokenPipeError:
            return

    def stat(self, remote_path: str) -> AdbStatResponse:
        """Return the stat information of ``remote_path``."""
        self.begin_synchronization()
        response = self.stat_with_explicit_ids(remote_path)
        self.end_transaction()
        return response

    def pull(self, source: str, output: BinaryIO) -> None:
        """Copy the remote file ``source`` into ``output``."""
        self.begin_synchronization()
        stat = self.stat_with_explicit_ids(source)
        if stat.file_perm == 0:
            raise UnknownResponseType("mode is 0: source file does not exist")

        self.transport.write_message(
            TransportMessage(MessageCommand.OKAY, self.local_id, self.remote_id)
        )

        path = source.encode()
        self.send_and_expect_okay(self._write(MessageSubcommand.RECV.with_arg(len(path)).to_bytes()))
        self.send_and_expect_okay(self._write(path))

        self.recv_file(output)
        self.end_transaction()

    def push(self, stream: BinaryIO, path: str) -> None:
        """Copy the content of ``stream`` to the remote file ``path``."""
        self.begin_synchronization()
        path_header = f"{path},0777".encode()
        send = MessageSubcommand.SEND.with_arg(len(path_header)).to_bytes()
        self.send_and_expect_okay(self._write(send + path_header))
        self.push_file(self.local_id, self.remote_id, stream)
        self.end_transaction()

    def reboot(self, reboot_type: RebootType) -> None:
        """Reboot the device into the mode ``reboot_type``."""
        self.open_session(f"reboot:{reboot_type}\0".encode())
        self.transport.read_message().assert_command(MessageCommand.OKAY)

    def uninstall(self, package: str) -> None:
        """Remove ``package`` from the device."""
        self.open_session(f"exec:cmd package 'uninstall' {package}\0".encode())
        status = self.transport.read_message().payload
        if status != _SUCCESS:
            raise AdbRequestFailed(status.decode("utf-8"))
        log.info("Package %s successfully uninstalled", package)

    def run_activity(self, package: str, activity: str) -> bytes:
        """Start ``activity`` of ``package`` and return the command output."""
        output = io.BytesIO()
        self.shell_command(["am", "start", f"{package}/{package}.{activity}"], output)
        return output.getvalue()

    def framebuffer_image(self) -> Image.Image:
        """Capture the screen as an RGBA image."""
        self.open_session(b"framebuffer:\0")
        payload = self.recv_and_reply_okay().payload
        if len(payload) < 4:
            raise ConversionError()
        (version,) = struct.unpack_from("<I", payload)
        info_type = _FRAMEBUFFER_VERSIONS.get(version)
        if info_type is None:
            raise UnimplementedFramebufferImageVersion(version)

        header_end = 4 + info_type.SIZE
        info = info_type.from_bytes(payload[4:header_end])
        data = bytearray(payload[header_end:])
        while len(data) != info.size:
            data += self.recv_and_reply_okay().payload
            log.debug("received framebuffer data. new size %d", len(data))

        expected = info.width * info.height * 4
        if len(data) < expected:
            raise FramebufferConversionError()
        try:
            image = Image.frombytes("RGBA", (info.width, info.height), bytes(data[:expected]))
        except ValueError:
            raise FramebufferConversionError() from None

        self.transport.read_message().assert_command(MessageCommand.CLSE)
        return image

    def framebuffer(self, path: str | os.PathLike) -> None:
        """Capture the screen and save it at ``path``; the format follows the extension."""
        self.framebuffer_image().save(path)

    def framebuffer_bytes(self) -> bytes:
        """Capture the screen and return it encoded as PNG."""
        buffer = io.BytesIO()
        self.framebuffer_image().save(buffer, format="PNG")
        return buffer.getvalue()