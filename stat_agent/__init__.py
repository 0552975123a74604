"""
stat_agent: one-shot host metrics agent

Samples CPU and memory utilization, prints the sample as a JSON line and
forwards it to an optional HTTP collector without waiting on the result.
"""

from stat_agent.agent import StatAgent
from stat_agent.sample import Sample, SampleAssembler

__all__ = ['StatAgent', 'Sample', 'SampleAssembler']
__version__ = '1.0.0'
