"""插件配置：默认路径、采样间隔与配置校验"""
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional
import json
import math
import os
import re

from utils.logger import getLogger


logger = getLogger("config")

PLUGIN_ID = 'signalk-rpi-monitor'
PLUGIN_NAME = 'RPI Monitor'
PLUGIN_DESCRIPTION = 'Signal K Node Server Plugin for Raspberry PI monitoring'

DEFAULT_RATE = 30
MEM_SOURCES = ('free', 'meminfo')

# dot-separated, no empty segments, no whitespace
_PATH_RE = re.compile(r'^[^.\s]+(\.[^.\s]+)*$')


class ConfigurationError(ValueError):
    """Raised when plugin options cannot be turned into a valid Configuration."""


PLUGIN_SCHEMA: Dict[str, Any] = {
    'type': 'object',
    'description': 'The user running node server must be in the video group to get GPU temperature',
    'properties': {
        'path_cpu_temp': {
            'title': 'SignalK Path for CPU temperature (K)',
            'type': 'string',
            'default': 'environment.rpi.cpu.temperature',
        },
        'path_gpu_temp': {
            'title': 'SignalK Path for GPU temperature (K)',
            'type': 'string',
            'default': 'environment.rpi.gpu.temperature',
        },
        'path_cpu_util': {
            'title': 'SignalK Path for CPU utilisation (Please install sysstat for per core monitoring)',
            'type': 'string',
            'default': 'environment.rpi.cpu.utilisation',
        },
        'path_mem_util': {
            'title': 'SignalK Path for memory utilisation',
            'type': 'string',
            'default': 'environment.rpi.memory.utilisation',
        },
        'path_sd_util': {
            'title': 'SignalK Path for SD card utilisation',
            'type': 'string',
            'default': 'environment.rpi.sd.utilisation',
        },
        'rate': {
            'title': 'Sample Rate (in seconds)',
            'type': 'number',
            'default': DEFAULT_RATE,
        },
        'mem_source': {
            'title': 'Memory source (free summary table or /proc/meminfo)',
            'type': 'string',
            'enum': list(MEM_SOURCES),
            'default': 'free',
        },
        'sd_mount': {
            'title': 'Mount point used for SD card utilisation',
            'type': 'string',
            'default': '/',
        },
        'probe_timeout': {
            'title': 'Kill a probe command after this many seconds (empty for no limit)',
            'type': ['number', 'null'],
            'default': None,
        },
    },
}


def _default(key: str):
    return PLUGIN_SCHEMA['properties'][key]['default']


@dataclass(frozen=True)
class Configuration:
    path_cpu_temp: str = _default('path_cpu_temp')
    path_gpu_temp: str = _default('path_gpu_temp')
    path_cpu_util: str = _default('path_cpu_util')
    path_mem_util: str = _default('path_mem_util')
    path_sd_util: str = _default('path_sd_util')
    rate: float = DEFAULT_RATE
    mem_source: str = 'free'
    sd_mount: str = '/'
    probe_timeout: Optional[float] = None

    def __post_init__(self):
        self.validate()

    def validate(self):
        for name in ('path_cpu_temp', 'path_gpu_temp', 'path_cpu_util', 'path_mem_util', 'path_sd_util'):
            value = getattr(self, name)
            if not isinstance(value, str) or not _PATH_RE.match(value):
                raise ConfigurationError(f'{name} must be a non-empty dot-separated path, got {value!r}')
        if not _is_positive_number(self.rate):
            raise ConfigurationError(f'rate must be a positive number of seconds, got {self.rate!r}')
        if self.mem_source not in MEM_SOURCES:
            raise ConfigurationError(f'mem_source must be one of {MEM_SOURCES}, got {self.mem_source!r}')
        if not isinstance(self.sd_mount, str) or not self.sd_mount.strip():
            raise ConfigurationError('sd_mount must be a non-empty string')
        if self.probe_timeout is not None and not _is_positive_number(self.probe_timeout):
            raise ConfigurationError(f'probe_timeout must be positive or empty, got {self.probe_timeout!r}')

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> 'Configuration':
        """Build a Configuration from plugin options; unknown keys are ignored, missing keys use defaults."""
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            logger.warning('Ignoring unknown options: %s', sorted(unknown))
        return cls(**{k: v for k, v in options.items() if k in known})

    def to_options(self) -> Dict[str, Any]:
        return asdict(self)


def _is_positive_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for key, env in (('rate', 'RPI_MONITOR_RATE'), ('probe_timeout', 'RPI_MONITOR_PROBE_TIMEOUT')):
        raw = os.getenv(env)
        if raw is None or raw == '':
            continue
        try:
            overrides[key] = float(raw)
        except ValueError:
            raise ConfigurationError(f'{env} must be a number, got {raw!r}')
    return overrides


def load_configuration(path: str | Path | None = None) -> Configuration:
    """Load options from a JSON file (if given), then apply environment overrides."""
    options: Dict[str, Any] = {}
    if path is not None:
        try:
            options = json.loads(Path(path).read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f'Cannot read configuration file {path}: {e}') from e
        if not isinstance(options, dict):
            raise ConfigurationError(f'Configuration file {path} must contain a JSON object')
    options.update(_env_overrides())
    return Configuration.from_options(options)
