"""监视器异常定义"""
from typing import Optional


class MonitorError(Exception):
    """Base class for per-family sampling failures; never fatal to a tick."""


class LaunchError(MonitorError):
    """The probe command could not be started, timed out or exited non-zero."""

    def __init__(self, command: str, message: str, returncode: Optional[int] = None, stderr: bytes = b''):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.decode('utf-8', errors='replace').strip()
        text = f'{message}: {command!r}'
        if detail:
            text = f'{text} ({detail})'
        super().__init__(text)


class ParseError(MonitorError):
    """Probe output did not match the expected shape."""

    def __init__(self, family, reason: str):
        self.family = family
        self.reason = reason
        super().__init__(f'{family}: {reason}')
