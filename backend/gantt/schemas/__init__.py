from gantt.schemas.task import TaskCreate, TaskUpdate, TaskRead
from gantt.schemas.dependency import DependencyCreate, DependencyRead
from gantt.schemas.resource import ResourceCreate, ResourceRead, ResourceAssign
from gantt.schemas.chart import (
    CriticalPathRead,
    ThemeUpdate,
    ZoomRequest,
    ViewRead,
    SessionStart,
    SessionMove,
    SessionEnd,
    SessionRead,
    KeyPress,
    KeyRead,
    ContextAction,
    HistoryRead,
)
