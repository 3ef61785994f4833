"""CPU 使用率监视器
依赖 sysstat 的 mpstat，采样窗口 5 秒；每个核心单独发布到 <base>.core.<n>.<leaf>
"""
from .base_monitor import ProbeMonitor
from .parsers import parse_cpu_util
from .paths import derive_core_path
from .units import MetricFamily


class CpuUtilMonitor(ProbeMonitor):
    family = MetricFamily.CPU_UTIL
    command = 'S_TIME_FORMAT=ISO mpstat -P ALL 5 1'

    def parse(self, text):
        return parse_cpu_util(text)

    def path_for(self, reading):
        if reading.core is None:
            return self.path
        return derive_core_path(self.path, reading.core)
