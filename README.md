# adbwire

adbwire is a Python library for the Android Debug Bridge (ADB) wire protocol.
It builds, encodes and checks ADB transport messages. It also runs device
commands over any transport you supply that can send and receive whole
messages. The commands are shell, sync `stat`/`pull`/`push`, reboot,
uninstall, activity start and framebuffer capture.

## Installation

```
pip install adbwire
```

With the test dependencies:

```
pip install "adbwire[test]"
```

## Modules

### `adbwire.message`: the wire format

- `MessageCommand`: the transport message commands `CNXN`, `CLSE`, `AUTH`,
  `OPEN`, `WRITE`, `OKAY` and `STLS`. `WRITE` prints as `WRTE`.
- `MessageSubcommand`: the sync protocol commands. `with_arg()` pairs a
  command with its argument and gives a `SubcommandWithArg`, which
  `to_bytes()` encodes.
- `MessageHeader`: the 24-byte header. Use `build()` to make one,
  `from_bytes()` to decode one and `to_bytes()` to encode one.
- `TransportMessage`: a header together with its payload. It has
  `check_message_integrity()` and `assert_command()`.
- `compute_crc32()` and `compute_magic()`.

### `adbwire.message_device`: sessions

- `MessageTransport`: the protocol your transport implements. It consists of
  `read_message()` and `write_message(message)`.
- `MessageDevice`: opens sessions with `open_session()`, which records the
  local and remote ids. It also handles the sync protocol with
  `begin_synchronization()`, `stat_with_explicit_ids()`, `recv_file()`,
  `push_file()` and `end_transaction()`.
- `MessageWriter`: a file-like writer. Each `write()` sends a `WRTE` message
  and waits for `OKAY`.
- `ShellMessageWriter`: a file-like writer. Each `write()` sends a `WRTE`
  message and does not wait for an answer.

### `adbwire.device`: device commands

`AdbDevice` extends `MessageDevice` with the following methods:

- `shell_command`
- `shell`
- `stat`
- `pull`
- `push`
- `reboot`
- `uninstall`
- `run_activity`
- `framebuffer_image`, which returns a Pillow image
- `framebuffer`, which saves to a path
- `framebuffer_bytes`, which returns PNG bytes

### `adbwire.models`: value types

- `AdbServerCommand`, with `ServerCommandKind`. `str()` gives the request
  text sent to an ADB server.
- `AdbStatResponse`
- `RebootType`
- `HostFeature`
- `SyncCommand`
- `AdbRequestStatus`
- `FrameBufferInfoV1` and `FrameBufferInfoV2`

### `adbwire.emulator`: emulator console

- `EmulatorCommand`: console commands built with `authenticate()`, `sms()`
  and `rotate()`. `str()` gives the newline-terminated console line.
- `emulator_address()`: maps a serial such as `emulator-5554` to the
  console's `(ip, port)`.

### `adbwire.errors`: exceptions

Every exception derives from `AdbError`.

## Building messages

```python
from adbwire.message import MessageCommand, TransportMessage

msg = TransportMessage(MessageCommand.OPEN, 1234, 0, b"shell:ls\0")
wire = msg.header.to_bytes() + msg.payload
assert msg.check_message_integrity()
print(MessageCommand.OPEN)   # OPEN
print(MessageCommand.WRITE)  # WRTE
```

## Talking to a device

Write a class with `read_message()` and `write_message()` that moves whole
`TransportMessage` objects over your connection, then pass it to `AdbDevice`:

```python
import io
from adbwire.device import AdbDevice
from adbwire.models import RebootType

device = AdbDevice(my_transport)

out = io.BytesIO()
device.shell_command(["getprop", "ro.product.model"], out)
print(out.getvalue().decode())

print(device.stat("/sdcard/notes.txt"))

with open("notes.txt", "wb") as fh:
    device.pull("/sdcard/notes.txt", fh)

with open("notes.txt", "rb") as fh:
    device.push(fh, "/sdcard/copy.txt")

device.framebuffer("screen.png")
png = device.framebuffer_bytes()

device.reboot(RebootType.BOOTLOADER)
```

`shell(reader, writer)` starts a background thread that writes the device's
output to `writer`. It then sends everything read from `reader` until
`reader` is exhausted.

Failures raise subclasses of `adbwire.errors.AdbError`. Examples are
`AdbRequestFailed`, `WrongResponseReceived` and
`UnimplementedFramebufferImageVersion`.

## Emulator console

```python
from adbwire.emulator import EmulatorCommand, emulator_address

host, port = emulator_address("emulator-5554")   # ("127.0.0.1", 5554)
line = str(EmulatorCommand.sms("123", "hello"))  # "sms send 123 hello\n"
```

## What adbwire does not do

- It has no transports. It does not open TCP, TLS or USB connections, and it
  does not perform the `CNXN`/`AUTH` handshake or RSA key authentication. You
  provide a connected `MessageTransport`.
- It has no ADB server client. `AdbServerCommand` only formats request text.
  Nothing in the package sends such a request or reads the answer.
- It has no emulator console connection. `EmulatorCommand` and
  `emulator_address` give only the line to send and the address to send it to.
- It has no APK install, no mDNS discovery and no command-line program.