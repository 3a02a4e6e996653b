"""
Standardized exception hierarchy for the Momentum progress engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class MomentumError(Exception):
    """
    Base exception for all momentum errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise MomentumError(
            message="Failed to save progress",
            user_id="user-42",
            operation="record_action_completion",
            context={"action_id": "abc-123"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (User Input)
# ==========================================

class ValidationError(MomentumError):
    """
    Raised when caller input fails validation

    Example:
        raise ValidationError(
            message="Emotion must be between 1 and 5",
            field="emotion",
            value=9
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Contract Violations (Programmer Errors)
# ==========================================

class ContractViolationError(MomentumError):
    """
    A caller broke the engine's call contract.

    Raised in strict mode; logged and ignored otherwise (see enforce_contract).
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("user_message", "Something went wrong while updating your progress.")
        super().__init__(message=message, **kwargs)


class UnknownBadgeError(ContractViolationError):
    """Badge identifier is not in the catalog"""

    def __init__(self, badge_id: str, **kwargs):
        self.badge_id = badge_id
        super().__init__(
            message=f"Unknown badge id '{badge_id}'",
            context={"badge_id": badge_id},
            **kwargs
        )


class InvalidXPAmountError(ContractViolationError):
    """XP awards must be positive"""

    def __init__(self, amount: int, **kwargs):
        self.amount = amount
        super().__init__(
            message=f"XP amount must be positive, got {amount}",
            context={"amount": amount},
            **kwargs
        )


class InvalidChallengeStateError(ContractViolationError):
    """Requested challenge transition is not allowed from its current state"""

    def __init__(
        self,
        message: str,
        challenge_id: Optional[str] = None,
        transition: Optional[str] = None,
        **kwargs
    ):
        self.challenge_id = challenge_id
        self.transition = transition
        super().__init__(
            message=message,
            context={"challenge_id": challenge_id, "transition": transition},
            **kwargs
        )


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(MomentumError):
    """
    Base class for persistence errors
    """
    pass


class ConnectionError(DatabaseError):
    """Database connection failed"""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(
            message=message,
            user_message="We're having trouble connecting to the database. Please try again in a moment.",
            **kwargs
        )


class QueryError(DatabaseError):
    """Database query execution failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs
    ):
        self.query = query
        super().__init__(
            message=message,
            user_message="We encountered an issue saving your progress. Please try again.",
            context={"query": query},
            **kwargs
        )


class RecordNotFoundError(DatabaseError):
    """Requested record does not exist"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(MomentumError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def enforce_contract(error: ContractViolationError) -> None:
    """
    Raise a contract violation in strict mode, otherwise log and continue.

    Callers must return without mutating state when this returns.
    """
    from momentum import config

    if config.STRICT_CONTRACTS:
        raise error

    logger.warning(
        f"Ignoring contract violation in {error.operation or 'unknown operation'}: "
        f"{error.message} (request_id={error.request_id})"
    )


def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> MomentumError:
    """
    Wrap driver exceptions (psycopg) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate MomentumError subclass

    Example:
        try:
            await cur.execute(query)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="save_outcome", user_id=user_id)
    """
    import psycopg

    if isinstance(error, psycopg.OperationalError):
        return ConnectionError(
            message=f"Database connection failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.Error):
        return QueryError(
            message=f"Database query failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            cause=error
        )

    return MomentumError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
