"""采样器：每个 tick 并发运行所有监视器，把结果逐条转发给 sink

各指标族互相独立，一个失败不会影响其它族，也不会从 tick() 抛出
"""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from threading import Lock
from typing import List, Optional, Sequence

from config import Configuration
from .base_monitor import ProbeMonitor
from .cpu_monitor import CpuUtilMonitor
from .errors import MonitorError
from .mem_monitor import MemMonitor
from .sd_monitor import SdMonitor
from .sink import MetricSink
from .temp_monitor import CpuTempMonitor, GpuTempMonitor
from .units import CONFIG_KEYS, UNITS, MetricFamily, Sample, check_units
from utils.logger import getLogger


logger = getLogger(__name__)


@dataclass
class PipelineResult:
    family: MetricFamily
    samples: List[Sample] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_monitors(config: Configuration) -> List[ProbeMonitor]:
    timeout = config.probe_timeout
    return [
        GpuTempMonitor(config.path_gpu_temp, timeout=timeout),
        CpuTempMonitor(config.path_cpu_temp, timeout=timeout),
        CpuUtilMonitor(config.path_cpu_util, timeout=timeout),
        MemMonitor(config.path_mem_util, source=config.mem_source, timeout=timeout),
        SdMonitor(config.path_sd_util, mount=config.sd_mount, timeout=timeout),
    ]


class Sampler:
    def __init__(self, config: Configuration, sink: MetricSink, monitors: Optional[Sequence[ProbeMonitor]] = None):
        check_units()
        self.config = config
        self.sink = sink
        self.monitors = list(monitors) if monitors is not None else build_monitors(config)
        self._meta_lock = Lock()
        self._meta_registered = False

    def register_metadata(self) -> bool:
        """Publish the unit of every configured base path; only the first call does anything."""
        with self._meta_lock:
            if self._meta_registered:
                return False
            for family in MetricFamily:
                self.sink.publish_metadata(getattr(self.config, CONFIG_KEYS[family]), UNITS[family])
            self._meta_registered = True
        logger.info('Registered units metadata for %d paths', len(MetricFamily))
        return True

    def _run_pipeline(self, monitor: ProbeMonitor) -> PipelineResult:
        try:
            samples = monitor()
            for sample in samples:
                self.sink.publish_value(sample.path, sample.value)
            return PipelineResult(monitor.family, samples)
        except MonitorError as e:
            logger.warning('Skipping %s this tick: %s', monitor.family, e)
            return PipelineResult(monitor.family, error=e)
        except Exception as e:
            logger.exception('Unexpected error sampling %s', monitor.family)
            return PipelineResult(monitor.family, error=e)

    def tick(self) -> List[PipelineResult]:
        """Run every pipeline once, concurrently, and wait for all of them."""
        if not self.monitors:
            return []
        with ThreadPoolExecutor(max_workers=len(self.monitors), thread_name_prefix='probe') as pool:
            futures = [pool.submit(self._run_pipeline, m) for m in self.monitors]
            results = [f.result() for f in futures]
        failed = [str(r.family) for r in results if not r.ok]
        logger.debug('Tick done: %d samples, failed families: %s',
                     sum(len(r.samples) for r in results), failed or 'none')
        return results
