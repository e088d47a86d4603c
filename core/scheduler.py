import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from core.cron import run_cron
from core.repository import UserTaskRepository
from core.time_utils import Clock, SystemClock, local_day

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

async def run_daily_maintenance(repository: UserTaskRepository, clock: Optional[Clock] = None) -> int:
    """
    Checks all users to see if their local day has rolled over since their last cron.
    If so, runs the cron rollover and saves the result.

    A failure for one user is logged and the sweep moves on to the next.
    Returns the number of users rolled over.
    """
    clock = clock or SystemClock()
    now = clock.now()
    logger.info("Checking daily maintenance for users at %s", now.isoformat())

    rolled = 0
    for user_id in await repository.list_user_ids():
        try:
            user, tasks = await repository.load(user_id)
            prefs = user.preferences
            today = local_day(now, prefs.timezone_offset, prefs.day_start)
            if today <= local_day(user.last_cron, prefs.timezone_offset, prefs.day_start):
                continue

            result = run_cron(user, tasks, now)
            await repository.save(result.user, result.tasks)
            rolled += 1
        except Exception:
            logger.exception("Error processing maintenance for user %s", user_id)

    logger.info("Daily maintenance completed, %d user(s) rolled over", rolled)
    return rolled

def start_scheduler(repository: UserTaskRepository, clock: Optional[Clock] = None):
    # Run periodically to catch day rollovers without restart
    scheduler.add_job(
        run_daily_maintenance,
        IntervalTrigger(minutes=settings.CRON_SWEEP_INTERVAL_MINUTES),
        args=[repository, clock],
    )
    scheduler.start()
