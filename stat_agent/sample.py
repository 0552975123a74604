"""
Sample assembly and serialization.

A Sample is always fully populated. Each metric is held as a Measurement
(either a value or the error text that replaced it) and only flattened into
the value/error field pairs of the wire format at serialization time:

    {"CPUUtilizationPercentage":42.5,"CPUError":"","FreeMemory":2048,
     "TotalMemory":8192,"MemoryError":"","timeStamp":"2024-01-15T10:30:00"}
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from stat_agent.errors import SerializationError
from stat_agent.readers import MemoryReading, read_cpu_percent, read_memory


logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S'


@dataclass(frozen=True)
class Measurement:
    """Result of one reader: a value, or the error that replaced it"""
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> 'Measurement':
        return cls(value=value)

    @classmethod
    def failed(cls, error: str) -> 'Measurement':
        return cls(error=error)

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Sample:
    """One snapshot of host CPU and memory state"""
    cpu: Measurement
    memory: Measurement
    timestamp: str

    @property
    def cpu_utilization_percent(self) -> float:
        return self.cpu.value if self.cpu.succeeded else 0.0

    @property
    def cpu_error(self) -> str:
        return self.cpu.error or ''

    @property
    def free_memory_bytes(self) -> int:
        return self.memory.value.free if self.memory.succeeded else 0

    @property
    def total_memory_bytes(self) -> int:
        return self.memory.value.total if self.memory.succeeded else 0

    @property
    def memory_error(self) -> str:
        return self.memory.error or ''

    def to_record(self) -> Dict[str, Any]:
        """Wire representation; key order is part of the format"""
        return {
            'CPUUtilizationPercentage': _wire_number(self.cpu_utilization_percent),
            'CPUError': self.cpu_error,
            'FreeMemory': self.free_memory_bytes,
            'TotalMemory': self.total_memory_bytes,
            'MemoryError': self.memory_error,
            'timeStamp': self.timestamp,
        }


def _wire_number(value: Any) -> Any:
    """Whole floats go out as integers: 12.0 is written as 12, 0.0 as 0"""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_timestamp(moment: datetime) -> str:
    """UTC, second precision, no zone suffix. Naive datetimes are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def serialize_sample(sample: Sample) -> str:
    """Encode a sample as a single line of compact JSON"""
    try:
        return json.dumps(sample.to_record(), separators=(',', ':'), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"failed to encode sample: {e}") from e


class SampleAssembler:
    """Runs both readers and combines their results into a Sample"""

    def __init__(
        self,
        cpu_reader: Callable[[], float] = read_cpu_percent,
        memory_reader: Callable[[], MemoryReading] = read_memory,
        clock: Callable[[], datetime] = utc_now
    ):
        self.cpu_reader = cpu_reader
        self.memory_reader = memory_reader
        self.clock = clock

    def assemble(self) -> Sample:
        """Build a complete Sample. Reader failures are recorded, never raised."""
        try:
            cpu = Measurement.ok(self.cpu_reader())
        except Exception as e:
            logger.error("Error getting CPU utilization: %s", e)
            cpu = Measurement.failed(str(e) or type(e).__name__)

        try:
            memory = Measurement.ok(self.memory_reader())
        except Exception as e:
            logger.error("Error getting memory info: %s", e)
            memory = Measurement.failed(str(e) or type(e).__name__)

        return Sample(
            cpu=cpu,
            memory=memory,
            timestamp=format_timestamp(self.clock())
        )
