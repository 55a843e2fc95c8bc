# leasehold/routers/deps.py
from __future__ import annotations

from ..domain.clock import Clock, system_clock


def get_clock() -> Clock:
    # tests override this through app.dependency_overrides
    return system_clock
