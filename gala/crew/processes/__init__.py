"""Crew collaboration processes."""

from gala.config import CrewProcess
from gala.crew.processes.consensus import execute_consensus, select_best_result
from gala.crew.processes.hierarchical import execute_hierarchical
from gala.crew.processes.parallel import execute_parallel
from gala.crew.processes.sequential import execute_sequential

PROCESSES = {
    CrewProcess.SEQUENTIAL: execute_sequential,
    CrewProcess.PARALLEL: execute_parallel,
    CrewProcess.HIERARCHICAL: execute_hierarchical,
    CrewProcess.CONSENSUS: execute_consensus,
}

__all__ = [
    "PROCESSES",
    "execute_consensus",
    "execute_hierarchical",
    "execute_parallel",
    "execute_sequential",
    "select_best_result",
]
