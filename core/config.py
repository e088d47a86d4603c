import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    APP_NAME: str = "QuestCron"
    DEFAULT_LOCALE: str = os.getenv("DEFAULT_LOCALE", "en")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Scheduler
    ENABLE_SCHEDULER: bool = os.getenv("ENABLE_SCHEDULER", "false").lower() == "true"
    CRON_SWEEP_INTERVAL_MINUTES: int = int(os.getenv("CRON_SWEEP_INTERVAL_MINUTES", "60"))

    # Recurrence
    EVERY_X_MAX: int = 9999
    RECURRENCE_SCAN_HORIZON_DAYS: int = 400

    # Scaling XP: Index 0 = Lvl 1->2, Index 1 = Lvl 2->3, etc.
    # Fallback to last value if level exceeds list length.
    LEVEL_XP_THRESHOLDS: list = [
        150,  # Lvl 1 -> 2
        160,  # Lvl 2 -> 3
        180,  # Lvl 3 -> 4
        190,  # Lvl 4 -> 5
        200,  # Lvl 5 -> 6
        210,  # Lvl 6 -> 7
        230,  # Lvl 7 -> 8
        240,  # Lvl 8 -> 9
        250,  # Lvl 9 -> 10
        260,  # Lvl 10 -> 11 (and beyond uses this)
    ]

    # Stat bounds
    MAX_HEALTH: float = 50.0
    DEATH_THRESHOLD: float = 0.0
    MAX_MANA: float = 100.0

    # Task value clamp
    TASK_VALUE_FLOOR: float = -47.27
    TASK_VALUE_CEILING: float = 21.27

    # Per-score base amounts (multiplied by tier factor, difficulty, level, class)
    EXP_BASE: float = 6.0
    GOLD_BASE: float = 1.0
    HP_DAMAGE_BASE: float = 2.0
    MANA_PER_SCORE: float = 0.25

    # Exp/gold scale with sqrt(min(lvl, cap))
    LEVEL_SCALING_CAP: int = 100

    DIFFICULTY_MULTIPLIERS: dict = {"trivial": 0.1, "easy": 1, "medium": 1.5, "hard": 2}

    # Pydantic Settings Config
    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
