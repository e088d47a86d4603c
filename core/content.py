"""Content catalog lookups consumed by the engine.

The real catalog (task defaults, class bonus tables) belongs to the content
service; `DefaultContentCatalog` ships the stock tables.
"""
from typing import Any, Dict, Protocol

from models.task import every_day


class ContentCatalog(Protocol):
    def get_task_type_defaults(self, task_type: str) -> Dict[str, Any]: ...

    def get_class_bonus(self, class_name: str, task_type: str) -> float: ...


TASK_TYPE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "habit": {"value": 0.0, "frequency": "daily"},
    "daily": {"value": 0.0, "frequency": "weekly", "every_x": 1, "streak": 0},
    "todo": {"value": 0.0},
    "reward": {"value": 0.0},
}

# Multiplier applied to exp/gold earned on a task type by each class.
CLASS_BONUSES: Dict[str, Dict[str, float]] = {
    "warrior": {"habit": 1.05, "daily": 1.1, "todo": 1.0},
    "rogue": {"habit": 1.1, "daily": 1.0, "todo": 1.05},
    "wizard": {"habit": 1.0, "daily": 1.05, "todo": 1.1},
    "healer": {"habit": 1.05, "daily": 1.05, "todo": 1.05},
}


class DefaultContentCatalog:
    def get_task_type_defaults(self, task_type: str) -> Dict[str, Any]:
        defaults = dict(TASK_TYPE_DEFAULTS.get(task_type, {}))
        if task_type == "daily":
            defaults["repeat"] = every_day()
        return defaults

    def get_class_bonus(self, class_name: str, task_type: str) -> float:
        return CLASS_BONUSES.get(class_name, {}).get(task_type, 1.0)


default_catalog = DefaultContentCatalog()
