"""Android Debug Bridge wire protocol: messages, sessions, device commands and emulator console commands."""

__version__ = "2.1.14"
__all__ = ["device", "emulator", "errors", "message", "message_device", "models"]