"""
Readers for host CPU and memory utilization.
"""

from dataclasses import dataclass

import psutil

from stat_agent.errors import ReadError


DEFAULT_CPU_INTERVAL = 0.01

# Raised by psutil when a counter is unavailable on this host
_OS_ERRORS = (psutil.Error, OSError, NotImplementedError)


@dataclass(frozen=True)
class MemoryReading:
    """Free and total virtual memory in bytes"""
    free: int
    total: int


def read_cpu_percent(interval: float = DEFAULT_CPU_INTERVAL) -> float:
    """Aggregate CPU utilization across all cores, sampled over `interval` seconds"""
    try:
        percent = psutil.cpu_percent(interval=interval, percpu=False)
    except _OS_ERRORS as e:
        raise ReadError(f"failed to get CPU utilization: {e}") from e
    return float(percent)


def read_memory() -> MemoryReading:
    """Current free and total virtual memory"""
    try:
        mem = psutil.virtual_memory()
    except _OS_ERRORS as e:
        raise ReadError(f"failed to get memory info: {e}") from e
    return MemoryReading(free=int(mem.free), total=int(mem.total))
