"""
监视器包：GPU/CPU 温度、CPU 使用率、内存使用率、SD 卡使用率五个监视器
每个监视器是一个类，实例作为仿函数调用时运行一次外部命令并返回 Sample 列表
Sampler 每个 tick 并发调用全部监视器，MonitorService 按固定间隔驱动 Sampler
"""
from .temp_monitor import GpuTempMonitor, CpuTempMonitor
from .cpu_monitor import CpuUtilMonitor
from .mem_monitor import MemMonitor
from .sd_monitor import SdMonitor
from .sampler import Sampler, PipelineResult, build_monitors
from .service import MonitorService, ServiceState
from .sink import MetricSink, LoggingSink, LatestValueSink, FanoutSink
from .units import MetricFamily, Unit, Sample

__all__ = [
    "GpuTempMonitor", "CpuTempMonitor", "CpuUtilMonitor", "MemMonitor", "SdMonitor",
    "Sampler", "PipelineResult", "build_monitors", "MonitorService", "ServiceState",
    "MetricSink", "LoggingSink", "LatestValueSink", "FanoutSink",
    "MetricFamily", "Unit", "Sample",
]
