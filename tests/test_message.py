import struct

import pytest

from adbwire.errors import ConversionError, WrongResponseReceived
from adbwire.message import (
    MessageCommand,
    MessageHeader,
    MessageSubcommand,
    SubcommandWithArg,
    TransportMessage,
    compute_crc32,
    compute_magic,
)


def test_command_values_and_names():
    assert MessageCommand(0x4E584E43) is MessageCommand.CNXN
    assert MessageCommand.__str__(MessageCommand.WRITE) == "WRTE"
    assert MessageCommand.__str__(MessageCommand.OKAY) == "OKAY"
    assert MessageCommand.__str__(MessageCommand.STLS) == "STLS"


@pytest.mark.parametrize(
    "word, command",
    [
        (b"CNXN", MessageCommand.CNXN),
        (b"CLSE", MessageCommand.CLSE),
        (b"AUTH", MessageCommand.AUTH),
        (b"OPEN", MessageCommand.OPEN),
        (b"WRTE", MessageCommand.WRITE),
        (b"OKAY", MessageCommand.OKAY),
        (b"STLS", MessageCommand.STLS),
    ],
)
def test_command_value_is_its_ascii_name(word, command):
    assert MessageCommand(struct.unpack("<I", word)[0]) is command
    assert MessageCommand.__str__(command) == word.decode("ascii")


@pytest.mark.parametrize("name", ["STAT", "SEND", "RECV", "QUIT", "FAIL", "DONE", "DATA", "LIST"])
def test_subcommand_value_is_its_ascii_name(name):
    sub = MessageSubcommand(struct.unpack("<I", name.encode("ascii"))[0])
    assert sub.name == name
    assert sub.with_arg(0).to_bytes()[:4] == name.encode("ascii")


def test_subcommand_with_arg_bytes():
    assert MessageSubcommand.DONE.with_arg(0).to_bytes() == b"DONE\x00\x00\x00\x00"
    packed = MessageSubcommand.DATA.with_arg(5).to_bytes()
    assert struct.unpack("<II", packed) == (MessageSubcommand.DATA, 5)


def test_subcommand_with_arg_fields():
    item = MessageSubcommand.STAT.with_arg(9)
    assert item == SubcommandWithArg(MessageSubcommand.STAT, 9)


def test_subcommand_arg_out_of_range():
    with pytest.raises(ConversionError):
        MessageSubcommand.SEND.with_arg(-1).to_bytes()


def test_crc32_is_additive():
    first, second = b"hello ", b"world"
    assert compute_crc32(first + second) == (compute_crc32(first) + compute_crc32(second)) & 0xFFFFFFFF
    assert compute_crc32(b"") == 0


def test_magic_flips_command():
    for command in MessageCommand:
        assert compute_magic(command) ^ command == 0xFFFFFFFF


def test_header_roundtrip():
    header = MessageHeader.build(MessageCommand.OPEN, 7, 0, b"shell:\0")
    encoded = header.to_bytes()
    assert len(encoded) == MessageHeader.SIZE
    assert MessageHeader.from_bytes(encoded) == header
    assert header.data_length == len(b"shell:\0")


def test_header_starts_with_command_word():
    header = MessageHeader.build(MessageCommand.CNXN, 0x01000000, 1048576, b"")
    assert header.to_bytes()[:4] == b"CNXN"


def test_header_from_wrong_length():
    with pytest.raises(ConversionError):
        MessageHeader.from_bytes(b"\x00" * 23)


def test_header_from_unknown_command():
    raw = struct.pack("<6I", 0x12345678, 0, 0, 0, 0, 0)
    with pytest.raises(ConversionError):
        MessageHeader.from_bytes(raw)


def test_header_argument_out_of_range():
    header = MessageHeader.build(MessageCommand.OKAY, 1 << 32, 0, b"")
    with pytest.raises(ConversionError):
        header.to_bytes()


def test_message_keeps_payload_and_is_intact():
    message = TransportMessage(MessageCommand.WRITE, 3, 4, b"payload")
    assert message.payload == b"payload"
    assert message.header.arg0 == 3
    assert message.header.arg1 == 4
    assert message.command is MessageCommand.WRITE
    assert message.check_message_integrity() is True


def test_message_with_tampered_payload_fails_integrity():
    original = TransportMessage(MessageCommand.WRITE, 3, 4, b"payload")
    tampered = TransportMessage.from_header_and_payload(original.header, b"paylaod!")
    assert tampered.check_message_integrity() is False
    rebuilt = TransportMessage.from_header_and_payload(original.header, b"payload")
    assert rebuilt.check_message_integrity() is True


def test_message_with_bad_magic_fails_integrity():
    header = MessageHeader.build(MessageCommand.OKAY, 0, 0, b"")
    bad = MessageHeader(header.command, 0, 0, 0, 0, header.magic ^ 1)
    assert TransportMessage.from_header_and_payload(bad, b"").check_message_integrity() is False


def test_assert_command():
    message = TransportMessage(MessageCommand.CLSE, 0, 0)
    message.assert_command(MessageCommand.CLSE)
    with pytest.raises(WrongResponseReceived) as info:
        message.assert_command(MessageCommand.OKAY)
    assert info.value.received == "CLSE"
    assert info.value.expected == "OKAY"