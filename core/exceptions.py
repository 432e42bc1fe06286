"""
Custom exceptions for redis-scripts
Provides structured error handling for script lookup and execution
"""
from typing import Any, Dict, Mapping, Optional


class RedisScriptsError(Exception):
    """Base exception for all redis-scripts errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logs and CLI output"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ScriptNotFoundError(RedisScriptsError, LookupError):
    """Raised when no script file backs the requested name"""

    def __init__(self, name: Any):
        super().__init__(
            message=f"no such script: {name}",
            error_code="SCRIPT_NOT_FOUND",
            details={"name": str(name)},
        )
        self.name = name


class ShaMismatchError(RedisScriptsError):
    """
    Raised when Redis reports an unexpected SHA after loading a script.

    Should never happen: it means the local digest and the bytes sent to the
    server disagree.
    """

    def __init__(self, name: str, expected: str, actual: Any):
        super().__init__(
            message=f"SHA mismatch for {name}: expected {expected}, got {actual}",
            error_code="SHA_MISMATCH",
            details={"name": name, "expected": expected, "actual": str(actual)},
        )
        self.name = name
        self.expected = expected
        self.actual = actual


class ScriptLoadError(RedisScriptsError):
    """Raised when one or more scripts could not be loaded into the script cache"""

    def __init__(self, failures: Mapping[str, BaseException]):
        names = ", ".join(sorted(failures))
        super().__init__(
            message=f"failed to load {len(failures)} script(s): {names}",
            error_code="SCRIPT_LOAD_FAILED",
            details={name: str(error) for name, error in failures.items()},
        )
        self.failures = dict(failures)


class ConfigurationError(RedisScriptsError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details={"setting": setting} if setting else {},
        )
