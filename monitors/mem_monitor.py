"""内存使用监视器
支持 free 的汇总表和 /proc/meminfo 原始内容两种输入
"""
from typing import Optional

from .base_monitor import ProbeMonitor, Runner
from .executor import run_command
from .parsers import parse_mem_util
from .units import MetricFamily


COMMANDS = {
    'free': 'free',
    'meminfo': 'cat /proc/meminfo',
}


class MemMonitor(ProbeMonitor):
    family = MetricFamily.MEM_UTIL

    def __init__(self, path: str, source: str = 'free', command: Optional[str] = None,
                 timeout: Optional[float] = None, runner: Runner = run_command):
        if source not in COMMANDS:
            raise ValueError(f'unknown memory source {source!r}')
        self.source = source
        super().__init__(path, command or COMMANDS[source], timeout, runner)

    def parse(self, text):
        return parse_mem_util(text, self.source)
