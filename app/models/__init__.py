from .pillar import Pillar, Standard
from .habit import Habit, HabitLog
from .reflection import Reflection
from .performance_snapshot import PerformanceSnapshot
from .advisory_alert import AdvisoryAlert
from .goal import Goal, Milestone

__all__ = [
    "Pillar",
    "Standard",
    "Habit",
    "HabitLog",
    "Reflection",
    "PerformanceSnapshot",
    "AdvisoryAlert",
    "Goal",
    "Milestone",
]
