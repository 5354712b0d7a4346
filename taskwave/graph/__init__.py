from .dag import TaskGraph
from .readiness import ReadinessTracker
from .types import CycleError, GraphError, MissingDependencyError, Task

__all__ = [
    "Task",
    "TaskGraph",
    "ReadinessTracker",
    "GraphError",
    "CycleError",
    "MissingDependencyError",
]
