"""Engine error taxonomy.

Every error carries a translation key plus parameters so the caller can render a
localized message with `core.i18n.translate`.
"""


class TaskEngineError(Exception):
    def __init__(self, key: str, **params):
        self.key = key
        self.params = params
        super().__init__(f"{key}: {params}" if params else key)


class ValidationError(TaskEngineError):
    """Malformed task input (recurrence, value, type). Raised before any mutation."""


class UnresolvableRecurrence(TaskEngineError):
    """No occurrence of a recurrence pattern inside the scan horizon."""


class PreconditionViolation(TaskEngineError):
    """The requested action is not allowed for the task or user in its current state."""


class NotFound(TaskEngineError):
    pass
