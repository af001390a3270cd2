"""pyfdhelm.io.power_density
Sinks receiving the pointwise power density written by power monitor elements.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, NamedTuple, TextIO

import numpy as np

from pyfdhelm.core.settings import FACE


class PowerDensityRecord(NamedTuple):
    r: float
    z: float
    theta: float       # polar angle atan2(r, z), measured from the symmetry axis
    integrand: float   # Re(u) Im(du/dn) - Im(u) Re(du/dn)


class PowerDensitySink(ABC):
    """Receives one zone per face element and one record per quadrature point."""

    @property
    def is_open(self) -> bool:
        return True

    def begin_zone(self) -> None:
        pass

    @abstractmethod
    def accept(self, record: PowerDensityRecord) -> None:
        ...


class StreamPowerDensitySink(PowerDensitySink):
    """
    Writes records as whitespace separated text:

        ZONE
        r z theta integrand
        ...

    The marker and number format come from ``FACE``. Once the underlying
    stream is closed the sink reports itself inactive.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream

    @property
    def is_open(self) -> bool:
        return not getattr(self.stream, "closed", False)

    def begin_zone(self) -> None:
        self.stream.write(f"{FACE.zone_marker}\n")

    def accept(self, record: PowerDensityRecord) -> None:
        self.stream.write(FACE.format_record(record) + "\n")


class RecordingPowerDensitySink(PowerDensitySink):
    """Keeps every record in memory, grouped per zone."""

    def __init__(self):
        self.zones: List[List[PowerDensityRecord]] = []

    def begin_zone(self) -> None:
        self.zones.append([])

    def accept(self, record: PowerDensityRecord) -> None:
        if not self.zones:
            self.zones.append([])
        self.zones[-1].append(record)

    @property
    def records(self) -> List[PowerDensityRecord]:
        return [rec for zone in self.zones for rec in zone]

    def as_array(self) -> np.ndarray:
        """(n, 4) array of (r, z, theta, integrand)."""
        recs = self.records
        if not recs:
            return np.zeros((0, 4))
        return np.array(recs, dtype=float)
