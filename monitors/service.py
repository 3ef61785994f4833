"""监视服务：按固定间隔调度采样器

状态只有 STOPPED / RUNNING 两种。tick 在后台线程中依次执行，不会重叠；
若一次 tick 超过 rate（mpstat 本身就要 5 秒），下一次会紧接着开始，
因此 rate 应大于最慢探针的耗时，这由调用方保证。
"""
from enum import Enum
from threading import Event, Lock, Thread
from typing import Any, Callable, Dict, List, Optional, Union
import time

from config import Configuration
from .sampler import PipelineResult, Sampler
from .sink import MetricSink
from utils.logger import getLogger


logger = getLogger(__name__)

# upper bound for a single Event.wait; longer waits are split into chunks
MAX_WAIT = 3600.0


class ServiceState(str, Enum):
    STOPPED = 'stopped'
    RUNNING = 'running'


class MonitorService:
    def __init__(self, sink: MetricSink, sampler_factory: Callable[[Configuration, MetricSink], Sampler] = Sampler):
        """
        sink: 接收 (path, value) 和 (path, unit) 的对象
        sampler_factory: 用于构造 Sampler，测试时可替换
        """
        self.sink = sink
        self.sampler_factory = sampler_factory
        self.config: Optional[Configuration] = None
        self.sampler: Optional[Sampler] = None
        self.ticks = 0
        self.last_results: List[PipelineResult] = []
        self.last_tick_at: Optional[float] = None
        self._state = ServiceState.STOPPED
        self._state_lock = Lock()
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is ServiceState.RUNNING

    def _tick(self, sampler: Sampler, stop_event: Event):
        try:
            results = sampler.tick()
        except Exception:
            logger.exception('Unexpected error in MonitorService tick')
            results = []
        with self._state_lock:
            # a tick still draining after stop() must not touch the next run's stats
            if stop_event is not self._stop_event:
                return
            self.last_results = results
            self.ticks += 1
            self.last_tick_at = time.time()

    def _run(self, sampler: Sampler, rate: float, stop_event: Event):
        next_at = time.monotonic()
        while not stop_event.is_set():
            self._tick(sampler, stop_event)
            next_at += rate
            now = time.monotonic()
            if next_at < now:
                logger.warning('Tick took longer than rate=%ss; starting the next one immediately', rate)
                next_at = now
            # 等待到下一个 tick 或直到停止；超时过大时 Event.wait 会抛 OverflowError，故按 MAX_WAIT 分段
            while not stop_event.is_set() and now < next_at:
                stop_event.wait(min(next_at - now, MAX_WAIT))
                now = time.monotonic()

    def start(self, config: Union[Configuration, Dict[str, Any], None] = None) -> bool:
        """Start sampling. Returns False (and does nothing) if already running.

        Raises ConfigurationError for invalid options; the service stays stopped.
        """
        if not isinstance(config, Configuration):
            config = Configuration.from_options(config)
        with self._state_lock:
            if self._state is ServiceState.RUNNING:
                logger.info('MonitorService already running; start ignored')
                return False
            sampler = self.sampler_factory(config, self.sink)
            sampler.register_metadata()
            self.config = config
            self.sampler = sampler
            self.ticks = 0
            self.last_results = []
            self.last_tick_at = None
            # 每次启动使用新的 Event，上一轮未结束的线程仍能看到自己的停止信号
            self._stop_event = Event()
            self._thread = Thread(target=self._run, args=(sampler, config.rate, self._stop_event),
                                  name='monitor-service', daemon=True)
            self._state = ServiceState.RUNNING
            self._thread.start()
        logger.info('MonitorService started with rate=%s', config.rate)
        return True

    def stop(self, join: bool = False, timeout: Optional[float] = 10.0):
        """Cancel the timer. In-flight probes are left to finish; idempotent."""
        with self._state_lock:
            if self._state is ServiceState.STOPPED:
                return
            self._stop_event.set()
            self._state = ServiceState.STOPPED
            thread = self._thread
        if join and thread:
            thread.join(timeout=timeout)
        logger.info('MonitorService stopped')

    def status(self) -> Dict[str, Any]:
        return {
            'state': self._state.value,
            'ticks': self.ticks,
            'last_tick_at': self.last_tick_at,
            'rate': self.config.rate if self.config else None,
            'families': {str(r.family): ('ok' if r.ok else str(r.error)) for r in self.last_results},
        }
