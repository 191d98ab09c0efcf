import struct

import pytest

from adbwire.errors import ConversionError, FramebufferConversionError, UnknownResponseType
from adbwire.models import (
    AdbRequestStatus,
    AdbServerCommand,
    AdbStatResponse,
    FrameBufferInfoV1,
    FrameBufferInfoV2,
    HostFeature,
    RebootType,
    ServerCommandKind,
    SyncCommand,
)


def test_pair_command():
    host = "192.168.0.197:34783"
    code = "091102"
    code_u32 = int(code)
    pair = AdbServerCommand(ServerCommandKind.PAIR, (host, code))
    assert str(pair) == f"host:pair:{code}:{host}"
    assert str(pair) != f"host:pair:{code_u32}:{host}"


def test_pair_accepts_tuple_address():
    pair = AdbServerCommand(ServerCommandKind.PAIR, (("192.168.0.197", 34783), "091102"))
    assert str(pair) == "host:pair:091102:192.168.0.197:34783"


@pytest.mark.parametrize(
    "command, expected",
    [
        (AdbServerCommand(ServerCommandKind.VERSION), "host:version"),
        (AdbServerCommand(ServerCommandKind.DEVICES_LONG), "host:devices-l"),
        (AdbServerCommand(ServerCommandKind.TRANSPORT_SERIAL, ("serial-0",)), "host:transport:serial-0"),
        (AdbServerCommand(ServerCommandKind.REBOOT, (RebootType.BOOTLOADER,)), "reboot:bootloader"),
        (AdbServerCommand(ServerCommandKind.REBOOT, (RebootType.SYSTEM,)), "reboot:"),
        (AdbServerCommand(ServerCommandKind.FORWARD, ("tcp:1", "tcp:2")), "host:forward:tcp:2;tcp:1"),
        (AdbServerCommand(ServerCommandKind.REVERSE, ("tcp:1", "tcp:2")), "reverse:forward:tcp:1;tcp:2"),
        (AdbServerCommand(ServerCommandKind.TCPIP, (5555,)), "tcpip:5555"),
        (AdbServerCommand(ServerCommandKind.INSTALL, (42,)), "exec:cmd package 'install' -S 42"),
        (AdbServerCommand(ServerCommandKind.UNINSTALL, ("com.example",)), "exec:cmd package 'uninstall' com.example"),
        (AdbServerCommand(ServerCommandKind.WAIT_FOR_DEVICE, ("device", "usb")), "host:wait-for-usb-device"),
        (AdbServerCommand(ServerCommandKind.SYNC), "sync:"),
    ],
)
def test_server_command_text(command, expected):
    assert str(command) == expected


def test_shell_command_uses_term(monkeypatch):
    monkeypatch.setenv("TERM", "xterm")
    command = AdbServerCommand(ServerCommandKind.SHELL_COMMAND, ("ls -l",))
    assert str(command) == "shell,TERM=xterm,raw:ls -l"
    assert str(AdbServerCommand(ServerCommandKind.SHELL)) == "shell,TERM=xterm,raw:"


def test_shell_command_without_term(monkeypatch):
    monkeypatch.delenv("TERM", raising=False)
    command = AdbServerCommand(ServerCommandKind.SHELL_COMMAND, ("ls",))
    assert str(command) == "shell,raw:ls"


def test_server_command_wrong_arity():
    with pytest.raises(ValueError):
        AdbServerCommand(ServerCommandKind.PAIR, ("only-address",))


@pytest.mark.parametrize("text, status", [("OKAY", AdbRequestStatus.OKAY), ("fail", AdbRequestStatus.FAIL), ("Okay", AdbRequestStatus.OKAY)])
def test_request_status_parse(text, status):
    assert AdbRequestStatus.parse(text) is status


def test_request_status_unknown():
    with pytest.raises(UnknownResponseType) as info:
        AdbRequestStatus.parse("NOPE")
    assert info.value.response == "nope"


@pytest.mark.parametrize(
    "reboot_type, expected",
    [
        (RebootType.SYSTEM, ""),
        (RebootType.BOOTLOADER, "bootloader"),
        (RebootType.RECOVERY, "recovery"),
        (RebootType.SIDELOAD, "sideload"),
        (RebootType.SIDELOAD_AUTO_REBOOT, "sideload-auto-reboot"),
        (RebootType.FASTBOOT, "fastboot"),
    ],
)
def test_reboot_type_text(reboot_type, expected):
    assert RebootType.__str__(reboot_type) == expected
    command = AdbServerCommand(ServerCommandKind.REBOOT, (reboot_type,))
    assert str(command) == f"reboot:{expected}"


def test_reboot_type_order():
    assert [RebootType.__str__(r) for r in RebootType] == [
        "", "bootloader", "recovery", "sideload", "sideload-auto-reboot", "fastboot",
    ]


def test_host_feature_parsing_and_display():
    assert HostFeature.from_bytes(b"shell_v2") is HostFeature.SHELL_V2
    assert HostFeature.from_bytes(b"cmd") is HostFeature.CMD
    assert str(HostFeature.SHELL_V2) == "ShellV2"
    assert str(HostFeature.CMD) == "Cmd"


def test_host_feature_unknown():
    with pytest.raises(ValueError, match="Unknown value"):
        HostFeature.from_bytes(b"teleport")


def test_sync_command_text():
    assert [SyncCommand.__str__(c) for c in SyncCommand] == ["LIST", "RECV", "SEND", "STAT"]


def test_stat_from_bytes():
    data = struct.pack("<3I", 0o100644, 1234, 1_600_000_000)
    stat = AdbStatResponse.from_bytes(data)
    assert stat == AdbStatResponse(0o100644, 1234, 1_600_000_000)


def test_stat_from_short_bytes():
    with pytest.raises(ConversionError):
        AdbStatResponse.from_bytes(b"\x00" * 11)


def test_stat_display():
    stat = AdbStatResponse(file_perm=33188, file_size=10, mod_time=0)
    assert str(stat) == (
        "File permissions: 33188\n"
        "File size: 10 bytes\n"
        "Modification time: 1970-01-01 00:00:00.000000000 UTC"
    )


def test_framebuffer_v1_parse():
    values = list(range(1, 13))
    info = FrameBufferInfoV1.from_bytes(struct.pack("<12I", *values))
    assert (info.bpp, info.size, info.width, info.height) == (1, 2, 3, 4)
    assert info.alpha_length == 12


def test_framebuffer_v2_parse():
    values = list(range(1, 14))
    info = FrameBufferInfoV2.from_bytes(struct.pack("<13I", *values))
    assert (info.bpp, info.color_space, info.size, info.width, info.height) == (1, 2, 3, 4, 5)
    assert info.alpha_length == 13


def test_framebuffer_short_data():
    with pytest.raises(FramebufferConversionError):
        FrameBufferInfoV1.from_bytes(b"\x00" * 47)
    with pytest.raises(FramebufferConversionError):
        FrameBufferInfoV2.from_bytes(b"\x00" * 48)