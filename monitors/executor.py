"""探针执行器
通过 ``sh -c`` 运行一条外部命令并捕获 stdout/stderr，不做重试
"""
from dataclasses import dataclass
from typing import Optional
import subprocess

import psutil

from .errors import LaunchError
from utils.logger import getLogger


logger = getLogger(__name__)


@dataclass(frozen=True)
class ProbeOutput:
    command: str
    stdout: bytes
    stderr: bytes
    returncode: int

    @property
    def text(self) -> str:
        return self.stdout.decode('utf-8', errors='replace')


def _kill_children(pid: int):
    # sh -c leaves pipeline children (mpstat, sed ...) behind if only the shell is killed
    try:
        procs = psutil.Process(pid).children(recursive=True)
    except psutil.NoSuchProcess:
        return
    for p in procs:
        try:
            p.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    psutil.wait_procs(procs, timeout=3)


def run_command(command: str, timeout: Optional[float] = None) -> ProbeOutput:
    """Run ``command`` to completion and return its captured output.

    Raises LaunchError if the shell cannot be started, the command exits
    non-zero, or ``timeout`` seconds elapse first.
    """
    try:
        proc = subprocess.Popen(['sh', '-c', command], stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except OSError as e:
        raise LaunchError(command, f'failed to start ({e})') from e

    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_children(proc.pid)
        proc.kill()
        stdout, stderr = proc.communicate()
        raise LaunchError(command, f'timed out after {timeout}s', proc.returncode, stderr)

    if proc.returncode != 0:
        raise LaunchError(command, f'exited with status {proc.returncode}', proc.returncode, stderr)
    if stderr.strip():
        logger.warning('%s wrote to stderr: %s', command, stderr.decode('utf-8', errors='replace').strip())
    logger.debug('%s -> %r', command, stdout)
    return ProbeOutput(command=command, stdout=stdout, stderr=stderr, returncode=proc.returncode)
