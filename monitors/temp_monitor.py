"""温度监视器
GPU 温度来自 vcgencmd（运行用户需在 video 组），CPU 温度来自 thermal_zone0，单位统一为 K
"""
from .base_monitor import ProbeMonitor
from .parsers import parse_cpu_temp, parse_gpu_temp
from .units import MetricFamily


class GpuTempMonitor(ProbeMonitor):
    family = MetricFamily.GPU_TEMP
    command = 'vcgencmd measure_temp'

    def parse(self, text):
        return parse_gpu_temp(text)


class CpuTempMonitor(ProbeMonitor):
    family = MetricFamily.CPU_TEMP
    command = 'cat /sys/class/thermal/thermal_zone0/temp'

    def parse(self, text):
        return parse_cpu_temp(text)
