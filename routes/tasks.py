from fastapi import APIRouter, HTTPException, status, Depends
from typing import Any, Dict, List, Literal
from pydantic import BaseModel, ValidationError as SchemaError

from core.completion import complete
from core.cron import CronResult, run_cron
from core.database import get_db
from core.errors import NotFound, TaskEngineError
from core.i18n import translate
from core.recurrence import is_due
from core.repository import UserTaskRepository
from core.task_ops import create_task
from core.time_utils import Clock, SystemClock
from models.task import Task
from models.user import UserStats

router = APIRouter(prefix="/users/{user_id}", tags=["Tasks"])

def get_clock() -> Clock:
    return SystemClock()

def get_translator():
    return translate

class TaskCreate(BaseModel):
    type: str
    fields: Dict[str, Any] = {}

class ScoreResponse(BaseModel):
    task: Task
    stats: UserStats
    delta: Dict[str, float]

class CronResponse(BaseModel):
    stats: UserStats
    health_delta: float
    missed: int
    diagnostics: List[Dict[str, str]]

def engine_error(exc: TaskEngineError, translator) -> HTTPException:
    code = status.HTTP_404_NOT_FOUND if isinstance(exc, NotFound) else status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=translator(exc.key, exc.params))

async def load_current(db: UserTaskRepository, user_id: str, clock: Clock) -> CronResult:
    """Load the user with any pending day rollover applied, so actions land on today."""
    user, tasks = await db.load(user_id)
    result = run_cron(user, tasks, clock.now())
    if result.user.last_cron != user.last_cron:
        await db.save(result.user, result.tasks)
    return result

@router.get("/tasks/due", response_model=List[Task])
async def get_due_tasks(user_id: str, db: UserTaskRepository = Depends(get_db),
                        clock: Clock = Depends(get_clock), translator=Depends(get_translator)):
    """Dailies scheduled today and not yet done, plus open todos."""
    try:
        current = await load_current(db, user_id, clock)
        now = clock.now()
        return [task for task in current.tasks if is_due(task, now, current.user.preferences)]
    except TaskEngineError as exc:
        raise engine_error(exc, translator)

@router.post("/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_user_task(user_id: str, task_in: TaskCreate, db: UserTaskRepository = Depends(get_db),
                           clock: Clock = Depends(get_clock), translator=Depends(get_translator)):
    try:
        user, _ = await db.load(user_id)
        task, user = create_task(user, task_in.type, task_in.fields, now=clock.now())
    except TaskEngineError as exc:
        raise engine_error(exc, translator)
    except SchemaError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    await db.save(user, [task])
    return task

@router.post("/tasks/{task_id}/score/{direction}", response_model=ScoreResponse)
async def score_task(user_id: str, task_id: str, direction: Literal["up", "down"],
                     db: UserTaskRepository = Depends(get_db), clock: Clock = Depends(get_clock),
                     translator=Depends(get_translator)):
    """
    Toggle / score a task.
    - Habit: scores in each enabled direction.
    - Daily/Todo: up completes, down unchecks; repeats are no-ops.
    - Reward: up buys.

    A pending day rollover runs first, so a completion after midnight counts for today.
    """
    try:
        current = await load_current(db, user_id, clock)
        user, tasks = current.user, current.tasks
        task = next((t for t in tasks if t.id == task_id), None)
        if task is None:
            raise NotFound("taskNotFound")
        result = complete(task, direction, user, now=clock.now())
    except TaskEngineError as exc:
        raise engine_error(exc, translator)

    await db.save(result.user, [result.task])
    return ScoreResponse(task=result.task, stats=result.user.stats, delta=result.delta._asdict())

@router.post("/cron", response_model=CronResponse)
async def run_user_cron(user_id: str, db: UserTaskRepository = Depends(get_db),
                        clock: Clock = Depends(get_clock), translator=Depends(get_translator)):
    try:
        user, tasks = await db.load(user_id)
    except TaskEngineError as exc:
        raise engine_error(exc, translator)

    result = run_cron(user, tasks, clock.now())
    await db.save(result.user, result.tasks)
    return CronResponse(
        stats=result.user.stats,
        health_delta=result.health_delta,
        missed=len(result.missed),
        diagnostics=[{"task_id": d.task_id, "error": d.error, "message": d.message} for d in result.diagnostics],
    )
