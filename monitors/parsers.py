"""探针输出解析
每个解析函数都是纯函数：输入命令的原始文本，返回 ParseResult，不抛出异常
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from itertools import takewhile
from typing import Dict, Iterable, NamedTuple, Optional, Tuple
import math
import re


KELVIN_OFFSET = 273.15
_CENT = Decimal('0.01')

_ALL_ROW = re.compile(r'\ball\b', re.IGNORECASE)
_CORE_INDEX = re.compile(r'^[0-9]+$')

# fallback column offsets for headerless mpstat rows: "<time> <cpu> %usr ... %idle"
MPSTAT_CPU_COL = 1
MPSTAT_IDLE_COL = 11

MEMINFO_REQUIRED = ('MemTotal', 'MemFree')
MEMINFO_RECLAIMABLE = ('Buffers', 'Cached', 'SReclaimable')


class Reading(NamedTuple):
    value: float
    core: Optional[int] = None


@dataclass(frozen=True)
class ParseResult:
    readings: Tuple[Reading, ...] = ()
    error: Optional[str] = None
    rejected: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, readings: Iterable[Reading], rejected: Iterable[str] = ()) -> 'ParseResult':
        return cls(readings=tuple(readings), rejected=tuple(rejected))

    @classmethod
    def failure(cls, reason: str, rejected: Iterable[str] = ()) -> 'ParseResult':
        return cls(error=reason, rejected=tuple(rejected))


def _number(token: str) -> Optional[float]:
    """Parse a finite decimal number, accepting ',' as the decimal separator."""
    token = token.strip()
    if ',' in token and '.' not in token:
        token = token.replace(',', '.', 1)
    try:
        value = float(token)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def round2(value: float) -> float:
    """Round to 2 decimals with ties going up, as Number.toFixed(2) does."""
    return float(Decimal(repr(value)).quantize(_CENT, ROUND_HALF_UP))


def _to_kelvin(celsius: float) -> float:
    return round2(celsius + KELVIN_OFFSET)


def parse_gpu_temp(text: str) -> ParseResult:
    """``vcgencmd measure_temp`` -> ``temp=45.6'C``"""
    _, sep, rest = text.partition('=')
    if not sep:
        return ParseResult.failure(f"no '=' in output {text.strip()!r}")
    token = rest.split("'", 1)[0]
    celsius = _number(token)
    if celsius is None:
        return ParseResult.failure(f'temperature {token.strip()!r} is not a number')
    return ParseResult.success([Reading(_to_kelvin(celsius))])


def parse_cpu_temp(text: str) -> ParseResult:
    """thermal_zone temp, integer millidegrees Celsius"""
    token = text.strip()
    millis = _number(token) if token else None
    if millis is None:
        return ParseResult.failure(f'temperature {token!r} is not a number')
    return ParseResult.success([Reading(_to_kelvin(millis / 1000))])


def _mpstat_rows(lines):
    """Return (rows, cpu_col, idle_col).

    With a header present only the first block is used, the trailing
    ``Average:`` block repeats the same rows.
    """
    for i, line in enumerate(lines):
        lowered = [f.lower() for f in line.split()]
        if '%idle' in lowered and 'cpu' in lowered:
            rows = list(takewhile(lambda l: l.strip(), lines[i + 1:]))
            return rows, lowered.index('cpu'), lowered.index('%idle')
    return lines, MPSTAT_CPU_COL, MPSTAT_IDLE_COL


def parse_cpu_util(text: str) -> ParseResult:
    """``mpstat -P ALL`` -> one reading per row.

    Rows whose CPU field is a core number carry ``core`` (0-based); the
    ``all`` row is the aggregate and has ``core=None``. Utilisation is
    ``(100 - %idle) / 100``.
    """
    if not _ALL_ROW.search(text):
        return ParseResult.failure("unrecognised mpstat output: no 'all' row")

    rows, cpu_col, idle_col = _mpstat_rows(text.splitlines())
    readings, rejected = [], []
    for line in rows:
        fields = line.split()
        if not fields:
            continue
        if len(fields) <= max(cpu_col, idle_col):
            rejected.append(f'too few fields in {line.strip()!r}')
            continue
        idle = _number(fields[idle_col])
        if idle is None or not 0 <= idle <= 100:
            rejected.append(f'idle field {fields[idle_col]!r} is not a percentage in {line.strip()!r}')
            continue
        cpu = fields[cpu_col]
        core = int(cpu) if _CORE_INDEX.match(cpu) else None
        readings.append(Reading(round2((100 - idle) / 100), core))

    if not readings:
        return ParseResult.failure('no utilisation rows found', rejected)
    return ParseResult.success(readings, rejected)


def parse_free(text: str) -> ParseResult:
    """``free`` summary table: ratio = used / total on the ``Mem:`` row"""
    for line in text.splitlines():
        fields = line.split()
        if not fields or fields[0] != 'Mem:':
            continue
        if len(fields) < 3:
            return ParseResult.failure(f'Mem: row too short: {line.strip()!r}')
        total, used = _number(fields[1]), _number(fields[2])
        if total is None or used is None:
            return ParseResult.failure(f'non-numeric Mem: row {line.strip()!r}')
        if total <= 0:
            return ParseResult.failure('total memory is zero')
        return ParseResult.success([Reading(round2(used / total))])
    return ParseResult.failure("no 'Mem:' row in output")


def meminfo_fields(text: str) -> Dict[str, int]:
    """Parse ``/proc/meminfo`` lines of the form ``Label:   123 kB``."""
    result = {}
    for line in text.splitlines():
        key, sep, rest = line.partition(':')
        parts = rest.split()
        if not sep or not parts:
            continue
        try:
            result[key.strip()] = int(parts[0])
        except ValueError:
            continue
    return result


def parse_meminfo(text: str) -> ParseResult:
    """``/proc/meminfo``: ratio = (total - (free + buffers + cached + slab)) / total"""
    values = meminfo_fields(text)
    missing = [k for k in MEMINFO_REQUIRED if k not in values]
    if missing:
        return ParseResult.failure(f'missing {", ".join(missing)} in meminfo')
    total = values['MemTotal']
    if total <= 0:
        return ParseResult.failure('MemTotal is zero')
    available = values['MemFree'] + sum(values.get(k, 0) for k in MEMINFO_RECLAIMABLE)
    return ParseResult.success([Reading(round2((total - available) / total))])


def parse_mem_util(text: str, source: str = 'free') -> ParseResult:
    if source == 'meminfo':
        return parse_meminfo(text)
    return parse_free(text)


def parse_sd_util(text: str) -> ParseResult:
    """``df --output=pcent`` -> last line, e.g. ``42`` or `` 42%``"""
    lines = [l.strip() for l in text.splitlines() if l.strip()]
    token = lines[-1].rstrip('%').strip() if lines else ''
    percent = _number(token) if token else None
    if percent is None or not 0 <= percent <= 100:
        return ParseResult.failure(f'usage {token!r} is not a percentage')
    return ParseResult.success([Reading(percent / 100)])
