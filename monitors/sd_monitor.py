"""SD 卡（根分区）使用率监视器"""
import shlex
from typing import Optional

from .base_monitor import ProbeMonitor, Runner
from .executor import run_command
from .parsers import parse_sd_util
from .units import MetricFamily


class SdMonitor(ProbeMonitor):
    family = MetricFamily.SD_UTIL

    def __init__(self, path: str, mount: str = '/', command: Optional[str] = None,
                 timeout: Optional[float] = None, runner: Runner = run_command):
        self.mount = mount
        command = command or f'df --output=pcent {shlex.quote(mount)} | tail -1'
        super().__init__(path, command, timeout, runner)

    def parse(self, text):
        return parse_sd_util(text)
