from typing import Callable, List, Optional

from .errors import ParseError
from .executor import ProbeOutput, run_command
from .parsers import ParseResult
from .units import MetricFamily, Sample, make_sample
from utils.logger import getLogger


logger = getLogger(__name__)

Runner = Callable[..., ProbeOutput]


class ProbeMonitor:
    """One probe + parser pipeline for a metric family.

    Calling the instance runs the command once and returns the samples;
    LaunchError / ParseError propagate to the caller.
    """
    family: MetricFamily
    command: str = ''

    def __init__(self, path: str, command: Optional[str] = None, timeout: Optional[float] = None,
                 runner: Runner = run_command):
        self.path = path
        if command is not None:
            self.command = command
        self.timeout = timeout
        self.runner = runner

    def parse(self, text: str) -> ParseResult:
        raise NotImplementedError("Subclasses must implement this method.")

    def path_for(self, reading) -> str:
        return self.path

    def __call__(self) -> List[Sample]:
        output = self.runner(self.command, timeout=self.timeout)
        logger.debug('got %s output %r', self.family, output.text)
        result = self.parse(output.text)
        for reason in result.rejected:
            logger.warning('%s: skipped %s', self.family, reason)
        if not result.ok:
            raise ParseError(self.family, result.error)
        return [make_sample(self.family, self.path_for(r), r.value) for r in result.readings]
