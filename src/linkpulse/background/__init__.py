"""Externally triggered background probe bursts."""

from linkpulse.background.cycle import TASK_IDENTIFIER, BackgroundCycle
from linkpulse.background.scheduler import AsyncioScheduler, BackgroundScheduler

__all__ = ["AsyncioScheduler", "BackgroundCycle", "BackgroundScheduler", "TASK_IDENTIFIER"]
