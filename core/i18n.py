from typing import Optional

from core.config import settings

# English templates; other locales are provided by the localization collaborator.
MESSAGES = {
    "en": {
        "invalidTaskType": "Task type must be one of habit, daily, todo, reward, got '{type}'.",
        "invalidFrequency": "Frequency must be one of daily, weekly, monthly, yearly, got '{frequency}'.",
        "everyXInvalid": "everyX must be an integer between 1 and {max}, got {everyX}.",
        "invalidDaysOfMonth": "daysOfMonth entries must be between 1 and 31.",
        "invalidWeeksOfMonth": "weeksOfMonth entries must be between -5 and 4.",
        "invalidDirection": "Direction must be 'up' or 'down', got '{direction}'.",
        "checklistOnlyDailyTodo": "Checklists are supported only on dailies and todos.",
        "taskTypeImmutable": "Task type cannot be changed once created.",
        "rewardCannotScoreDown": "Rewards can only be purchased, not scored down.",
        "rewardValueNegative": "A reward cannot cost less than 0 gold, got {value}.",
        "habitDirectionDisabled": "This habit cannot be scored {direction}.",
        "messageNotEnoughGold": "Not enough gold.",
        "recurrenceUnresolvable": "Task {taskId} has no occurrence within {horizon} days.",
        "checklistItemNotFound": "No checklist item with id {itemId}.",
        "taskNotFound": "Task not found.",
        "userNotFound": "User not found.",
    },
}


def translate(key: str, params: Optional[dict] = None, locale: Optional[str] = None) -> str:
    """Render the message for `key`, falling back to English and then to the key itself."""
    catalog = MESSAGES.get(locale or settings.DEFAULT_LOCALE, MESSAGES["en"])
    template = catalog.get(key) or MESSAGES["en"].get(key)
    if template is None:
        return key
    try:
        return template.format(**(params or {}))
    except (KeyError, IndexError):
        return template
