from .error_handler import (
    PlanogramError, ValidationError, ConfigurationError, InvalidGeometry,
    CapacityExceeded, TargetUnavailable, PersistenceFailure, MalformedPayload,
    handle_errors,
)
from .logger import get_logger

__all__ = [
    'PlanogramError', 'ValidationError', 'ConfigurationError', 'InvalidGeometry',
    'CapacityExceeded', 'TargetUnavailable', 'PersistenceFailure', 'MalformedPayload',
    'handle_errors', 'get_logger',
]
