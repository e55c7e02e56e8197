"""
Exceptions raised by the goal-tracking core.

Each error also derives from the matching builtin so callers can catch
either the specific type or the usual ValueError/IndexError/OSError.
"""

from typing import Optional


class QuestError(Exception):
    """Base exception for Eternal Quest"""
    pass


class ValidationError(QuestError, ValueError):
    """Raised when goal-creation input is invalid"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")


class GoalIndexError(QuestError, IndexError):
    """Raised when a goal reference is out of range"""
    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        if count:
            detail = f"expected 0 to {count - 1}"
        else:
            detail = "there are no goals"
        super().__init__(f"Goal index {index} out of range: {detail}")


class ParseError(QuestError, ValueError):
    """Raised when a save file is malformed"""
    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(f"Malformed save file: {message}")


class StorageError(QuestError, OSError):
    """Raised when reading or writing a save file fails"""
    def __init__(self, operation: str, path: str, details: str):
        self.operation = operation
        self.path = path
        self.details = details
        super().__init__(f"Could not {operation} {path}: {details}")
