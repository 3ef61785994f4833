"""指标族、单位表与采样值

单位在启动时确定一次，注册元数据和构造 Sample 都从 UNITS 表中读取
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from config import ConfigurationError


class MetricFamily(str, Enum):
    GPU_TEMP = 'gpu_temp'
    CPU_TEMP = 'cpu_temp'
    CPU_UTIL = 'cpu_util'
    MEM_UTIL = 'mem_util'
    SD_UTIL = 'sd_util'

    def __str__(self):
        return self.value


class Unit(str, Enum):
    KELVIN = 'K'
    RATIO = 'ratio'

    def __str__(self):
        return self.value


UNITS: Dict[MetricFamily, Unit] = {
    MetricFamily.GPU_TEMP: Unit.KELVIN,
    MetricFamily.CPU_TEMP: Unit.KELVIN,
    MetricFamily.CPU_UTIL: Unit.RATIO,
    MetricFamily.MEM_UTIL: Unit.RATIO,
    MetricFamily.SD_UTIL: Unit.RATIO,
}

# family -> Configuration attribute holding its base path
CONFIG_KEYS: Dict[MetricFamily, str] = {
    MetricFamily.GPU_TEMP: 'path_gpu_temp',
    MetricFamily.CPU_TEMP: 'path_cpu_temp',
    MetricFamily.CPU_UTIL: 'path_cpu_util',
    MetricFamily.MEM_UTIL: 'path_mem_util',
    MetricFamily.SD_UTIL: 'path_sd_util',
}


@dataclass(frozen=True)
class Sample:
    path: str
    value: float
    unit: Unit


def make_sample(family: MetricFamily, path: str, value: float) -> Sample:
    return Sample(path=path, value=value, unit=UNITS[family])


def check_units():
    missing = [f for f in MetricFamily if f not in UNITS or f not in CONFIG_KEYS]
    if missing:
        raise ConfigurationError(f'No unit or path key declared for: {", ".join(map(str, missing))}')
