from pydantic import BaseModel, Field
from typing import Dict, List, Literal, NamedTuple, Optional
from datetime import datetime
from uuid import uuid4

from core.time_utils import get_current_time

TaskType = Literal["habit", "daily", "todo", "reward"]
TASK_TYPES = ("habit", "daily", "todo", "reward")
FREQUENCIES = ("daily", "weekly", "monthly", "yearly")

# Habitica-style weekday keys, Monday first (matches date.weekday()).
WEEKDAY_KEYS = ("m", "t", "w", "th", "f", "s", "su")


def new_id() -> str:
    return str(uuid4())

def every_day() -> Dict[str, bool]:
    return {key: True for key in WEEKDAY_KEYS}


class TaskCapabilities(NamedTuple):
    has_checklist: bool
    has_streak: bool
    has_recurrence: bool
    has_completed: bool


TASK_CAPABILITIES: Dict[str, TaskCapabilities] = {
    "habit": TaskCapabilities(has_checklist=False, has_streak=False, has_recurrence=False, has_completed=False),
    "daily": TaskCapabilities(has_checklist=True, has_streak=True, has_recurrence=True, has_completed=True),
    "todo": TaskCapabilities(has_checklist=True, has_streak=False, has_recurrence=False, has_completed=True),
    "reward": TaskCapabilities(has_checklist=False, has_streak=False, has_recurrence=False, has_completed=False),
}


class ChecklistItem(BaseModel):
    id: str = Field(default_factory=new_id)
    text: str = ""
    completed: bool = False


class HistoryEntry(BaseModel):
    date: datetime
    value: float
    scored_up: int = 0
    scored_down: int = 0


class Task(BaseModel):
    """
    A habit, daily, todo or reward.

    One model for all four types; `capabilities` says which of the
    type-specific fields are meaningful:
    - habit: scored up/down any number of times, `counter_up`/`counter_down`
      reset per `frequency` period. `up`/`down` switch a direction off.
    - daily: recurring (`frequency`, `every_x`, `repeat`, `days_of_month`,
      `weeks_of_month`, `start_date`), `completed`, `streak`, `checklist`.
    - todo: `completed`, `checklist`.
    - reward: `value` is the gold price.

    `history` is append-only.
    """
    id: str = Field(default_factory=new_id)
    user_id: Optional[str] = None
    title: str = Field(..., max_length=100)
    type: TaskType
    notes: Optional[str] = None
    difficulty: str = "easy" # 'trivial', 'easy', 'medium', 'hard'

    # Scoring
    value: float = 0.0
    history: List[HistoryEntry] = []

    # State
    completed: bool = False
    streak: int = 0
    yester_daily: bool = True
    counter_up: int = 0
    counter_down: int = 0
    up: bool = True
    down: bool = True

    # Recurrence
    frequency: str = "weekly" # 'daily', 'weekly', 'monthly', 'yearly'
    every_x: int = 1
    repeat: Dict[str, bool] = Field(default_factory=every_day)
    days_of_month: List[int] = []
    weeks_of_month: List[int] = []
    start_date: Optional[datetime] = None

    checklist: List[ChecklistItem] = []
    created_at: datetime = Field(default_factory=get_current_time)

    class Config:
        populate_by_name = True

    @property
    def capabilities(self) -> TaskCapabilities:
        return TASK_CAPABILITIES[self.type]

    def checklist_progress(self) -> float:
        """Fraction of checklist items done (0.0 without a checklist)."""
        if not self.checklist:
            return 0.0
        return sum(1 for item in self.checklist if item.completed) / len(self.checklist)
