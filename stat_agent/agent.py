#!/usr/bin/env python3
"""
Stat agent - samples CPU and memory once, prints it, and reports it.
"""

import logging
import threading
from contextlib import ExitStack
from typing import Optional

import click

from stat_agent.config import (
    DEFAULT_ENV_FILE,
    AgentConfig,
    load_config,
    load_config_file,
    load_env_file,
)
from stat_agent.emitter import StreamEmitter
from stat_agent.errors import ConfigLoadError, SerializationError
from stat_agent.log import setup_logging
from stat_agent.readers import read_cpu_percent, read_memory
from stat_agent.reporter import RemoteReporter
from stat_agent.sample import SampleAssembler, serialize_sample


logger = logging.getLogger(__name__)


class StatAgent:
    """One sampling-and-reporting cycle per call to run_once()"""

    def __init__(
        self,
        assembler: SampleAssembler,
        emitter: StreamEmitter,
        reporter: RemoteReporter
    ):
        self.assembler = assembler
        self.emitter = emitter
        self.reporter = reporter

    @classmethod
    def from_config(cls, config: AgentConfig, emitter: Optional[StreamEmitter] = None) -> 'StatAgent':
        cpu_interval = config.cpu_interval
        return cls(
            assembler=SampleAssembler(
                cpu_reader=lambda: read_cpu_percent(cpu_interval),
                memory_reader=read_memory
            ),
            emitter=emitter or StreamEmitter(),
            reporter=RemoteReporter(
                config.destination_url,
                destination_env=config.destination_env,
                timeout=config.timeout
            )
        )

    def run_once(self) -> Optional[threading.Thread]:
        """
        Sample, emit locally, then hand the payload to the reporter.

        Returns the background report thread, if one was started. Nothing
        here raises: a sample that cannot be serialized is logged and dropped
        before either emission or reporting.
        """
        sample = self.assembler.assemble()

        try:
            payload = serialize_sample(sample)
        except SerializationError as e:
            logger.error("Error marshalling JSON: %s", e)
            return None

        self.emitter.emit(payload)
        return self.reporter.report(payload)


def _resolve_config(
    config_path: Optional[str],
    destination: Optional[str],
    destination_env: Optional[str],
    timeout: Optional[float],
    cpu_interval: Optional[float]
) -> AgentConfig:
    file_settings = {}
    if config_path:
        try:
            file_settings = load_config_file(config_path)
        except ConfigLoadError as e:
            logger.error("Error loading config file: %s", e)

    overrides = dict(
        destination_url=destination,
        destination_env=destination_env,
        timeout=timeout,
        cpu_interval=cpu_interval
    )
    try:
        return load_config(file_settings, **overrides)
    except ConfigLoadError as e:
        logger.error("Error loading config file: %s", e)
        return load_config(None, **overrides)


@click.command()
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='Optional config.yml with a reporting section')
@click.option('--env-file', default=DEFAULT_ENV_FILE, show_default=True,
              help='Env file to load before reading the environment')
@click.option('--destination', default=None, help='Collector URL (overrides the environment)')
@click.option('--destination-env', default=None,
              help='Environment variable holding the collector URL [default: PLOT_KEY]')
@click.option('--output', type=click.Path(dir_okay=False), default=None,
              help='Append samples to this file instead of stdout')
@click.option('--cpu-interval', type=click.FloatRange(min=0), default=None,
              help='CPU sampling window in seconds [default: 0.01]')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='HTTP timeout in seconds for the report')
@click.option('--report-grace', type=click.FloatRange(min=0), default=0.0, show_default=True,
              help='Seconds to let the report finish before exiting')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default='INFO', show_default=True)
@click.option('--log-json', is_flag=True, help='Emit diagnostics as JSON')
def main(
    config_path: Optional[str],
    env_file: str,
    destination: Optional[str],
    destination_env: Optional[str],
    output: Optional[str],
    cpu_interval: Optional[float],
    timeout: Optional[float],
    report_grace: float,
    log_level: str,
    log_json: bool
):
    """Sample host CPU and memory once and report it"""
    setup_logging(level=getattr(logging, log_level.upper()), use_json=log_json)

    try:
        load_env_file(env_file)
    except ConfigLoadError as e:
        logger.error("Error loading .env file: %s", e)

    config = _resolve_config(config_path, destination, destination_env, timeout, cpu_interval)

    with ExitStack() as stack:
        stream = None
        if output:
            try:
                stream = stack.enter_context(open(output, 'a'))
            except OSError as e:
                logger.error("Cannot open %s, writing to stdout: %s", output, e)

        agent = StatAgent.from_config(config, emitter=StreamEmitter(stream))

        try:
            report_thread = agent.run_once()
        except Exception:
            # Best-effort telemetry: a lost sample must not fail the process
            logger.exception("Error in collection cycle")
            report_thread = None

    if report_thread is not None and report_grace > 0:
        report_thread.join(timeout=report_grace)


if __name__ == '__main__':
    main()
