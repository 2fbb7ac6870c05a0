from dailytasks.models.task_assignment import TaskAssignment
from dailytasks.models.task_completion import TaskCompletion
from dailytasks.models.task_template import TaskTemplate
from dailytasks.models.user import User

__all__ = [
    "TaskAssignment",
    "TaskCompletion",
    "TaskTemplate",
    "User",
]
