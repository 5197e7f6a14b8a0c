from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by schedsim."""


class InvalidProcessError(SchedulerError, ValueError):
    """A process record violates the input contract (bad burst, arrival or id)."""


class InvalidQuantumError(SchedulerError, ValueError):
    pass


class UnknownAlgorithmError(SchedulerError, ValueError):
    pass


class WorkloadFormatError(SchedulerError, ValueError):
    """A workload file could not be parsed into processes."""
