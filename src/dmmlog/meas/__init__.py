"""Sampling: the scheduler, the per-sample pipeline and cancellation.

Examples
--------
```python
from dmmlog.device import MockDMM
from dmmlog.meas import SamplePipeline, Scheduler
from dmmlog.types import SamplingConfig
from dmmlog.util.clock import SystemClock

clock = SystemClock()
scheduler = Scheduler(SamplingConfig(interval=0.5, max_samples=10), clock)
result = scheduler.run(SamplePipeline(MockDMM(), clock), sink)
```
"""

from .cancel import CancelToken, cancel_on_signals
from .pipeline import SamplePipeline
from .scheduler import RunResult, RunStatus, Scheduler

__all__ = [
    "CancelToken",
    "RunResult",
    "RunStatus",
    "SamplePipeline",
    "Scheduler",
    "cancel_on_signals",
]
