"""
Custom exceptions for the TaskStreak application.
Computation errors are raised by the pure services; lookups raise the not-found family.
"""


class TaskStreakException(Exception):
    """Base exception for TaskStreak application"""
    pass


class InvalidArgumentException(TaskStreakException):
    """Raised when an input value cannot be used (unknown difficulty, bad timestamp, bad time)"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class PreconditionFailedException(TaskStreakException):
    """Raised when an operation is not allowed in the current state"""
    def __init__(self, message: str):
        self.reason = message
        super().__init__(message)


class NotParticipantException(TaskStreakException):
    """Raised when a user acts on a competition they are not part of"""
    def __init__(self, competition_id: int, user_id: int):
        self.competition_id = competition_id
        self.user_id = user_id
        super().__init__(
            f"User {user_id} is not a participant of competition {competition_id}"
        )


class NotFoundException(TaskStreakException):
    """Base for missing rows"""
    pass


class UserNotFoundException(NotFoundException):
    """Raised when a user is not found"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class TaskNotFoundException(NotFoundException):
    """Raised when a task is not found"""
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class CompetitionNotFoundException(NotFoundException):
    """Raised when a competition is not found"""
    def __init__(self, competition_id: int):
        self.competition_id = competition_id
        super().__init__(f"Competition with ID {competition_id} not found")
