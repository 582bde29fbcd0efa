from functools import wraps
from typing import Callable, Any

class PlanogramError(Exception):
    """Base exception for planogram system"""
    pass

class ValidationError(PlanogramError):
    """Data validation error"""
    pass

class ConfigurationError(PlanogramError):
    """Configuration error"""
    pass

class InvalidGeometry(PlanogramError):
    """Non-positive scale factor or negative derived dimensions"""
    pass

class CapacityExceeded(PlanogramError):
    """Segment would overflow the width available on a shelf"""

    def __init__(self, message: str, occupied: float = 0.0, available: float = 0.0):
        super().__init__(message)
        self.occupied = occupied
        self.available = available

class TargetUnavailable(PlanogramError):
    """Transfer gesture ended without a valid drop target"""
    pass

class PersistenceFailure(PlanogramError):
    """The persistence collaborator rejected or failed to apply a commit"""
    pass

class MalformedPayload(PlanogramError):
    """Drag payload failed to parse or validate"""
    pass

def handle_errors(default_return=None, raise_on_error=True):
    """Decorator for error handling"""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except PlanogramError:
                if raise_on_error:
                    raise
                return default_return
            except Exception as e:
                if raise_on_error:
                    raise PlanogramError(f"Unexpected error in {func.__name__}: {str(e)}") from e
                return default_return
        return wrapper
    return decorator
