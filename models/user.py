from pydantic import BaseModel, Field
from typing import Dict, List
from datetime import datetime

from core.time_utils import get_current_time
from models.task import new_id

class UserStats(BaseModel):
    hp: float = 50.0
    exp: float = 0.0
    gp: float = 0.0 # Gold
    mp: float = 10.0
    lvl: int = 1
    class_name: str = Field("warrior", alias="class") # 'warrior', 'rogue', 'wizard', 'healer'
    # Fractional bonuses, e.g. {"exp": 0.1} is +10% experience
    buffs: Dict[str, float] = {}

    class Config:
        populate_by_name = True

class Preferences(BaseModel):
    timezone_offset: int = 0 # Minutes behind UTC
    day_start: int = Field(0, ge=0, le=23) # Local hour at which a new day begins
    sleep: bool = False # Resting in the inn: streaks frozen, no damage

class TasksOrder(BaseModel):
    habits: List[str] = []
    dailys: List[str] = []
    todos: List[str] = []
    rewards: List[str] = []

    def for_type(self, task_type: str) -> List[str]:
        return getattr(self, f"{task_type}s")

class User(BaseModel):
    id: str = Field(default_factory=new_id)
    username: str = "Adventurer"

    # Game Stats
    stats: UserStats = Field(default_factory=UserStats)
    preferences: Preferences = Field(default_factory=Preferences)
    tasks_order: TasksOrder = Field(default_factory=TasksOrder)

    last_cron: datetime = Field(default_factory=get_current_time)

    class Config:
        populate_by_name = True
