"""
Standardized exception hierarchy for studyquest
Every error carries a request id, structured context and a message safe to show to learners
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


def _merge_context(kwargs: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    """Pop a caller-supplied context out of kwargs and merge the subclass fields into it"""
    context = dict(kwargs.pop("context", None) or {})
    context.update(extra)
    return context


class StudyQuestError(Exception):
    """
    Base exception for all studyquest errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise StudyQuestError(
            message="Failed to save study session",
            user_id="user-1",
            operation="insert_session_result",
            context={"deck_id": "deck-1"}
        )
    """

    log_level = logging.ERROR

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
        """Emit one log record at log_level with the structured fields as extra"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,  # Avoid conflict with logging's 'context'
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(
                self.log_level,
                f"{self.__class__.__name__}: {self.message}",
                extra=log_data,
                exc_info=self.cause
            )
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Public fields for a client-facing error payload"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors
# ==========================================

class ValidationError(StudyQuestError):
    """
    Raised when caller input fails validation

    Examples:
    - Negative XP amount
    - Card id that is not part of the loaded deck
    """

    log_level = logging.WARNING

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
            context=_merge_context(kwargs, {"field": field, "value": value}),
            **kwargs
        )


class InvalidSessionStateError(ValidationError):
    """Quiz operation called in a session state that does not allow it"""

    def __init__(self, operation: str, state: str, **kwargs):
        self.state = state
        super().__init__(
            message=f"{operation} is not allowed while the session is {state}",
            field="state",
            value=state,
            operation=operation,
            **kwargs
        )


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(StudyQuestError):
    """
    Base class for store-related errors
    """
    pass


class ConnectionError(DatabaseError):
    """The store could not be reached"""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(
            message=message,
            user_message="StudyQuest can't reach its database right now. Please try again in a moment.",
            **kwargs
        )


class QueryError(DatabaseError):
    """A store statement was rejected or failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs
    ):
        self.query = query
        super().__init__(
            message=message,
            user_message="We couldn't read or save your study progress. Please try again.",
            context=_merge_context(kwargs, {"query": query}),
            **kwargs
        )


class RecordNotFoundError(DatabaseError):
    """Requested record does not exist"""

    log_level = logging.WARNING

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
            context=_merge_context(kwargs, {"record_type": record_type, "record_id": record_id}),
            **kwargs
        )


class PersistenceError(DatabaseError):
    """
    A write that the user is waiting on failed (session submit, profile update)

    The in-memory state that produced the write is kept, so the caller can
    retry the same operation.
    """

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="We couldn't save your progress. Your answers are kept, please try again.",
            **kwargs
        )


class LoadFailedError(StudyQuestError):
    """Reading a deck or its cards failed; the session is left as it was"""

    def __init__(self, message: str, deck_id: Optional[str] = None, **kwargs):
        self.deck_id = deck_id
        super().__init__(
            message=message,
            user_message="Failed to load this deck. Please try again.",
            context=_merge_context(kwargs, {"deck_id": deck_id}),
            **kwargs
        )


# ==========================================
# Authorization
# ==========================================

class AuthorizationError(StudyQuestError):
    """The user may not act on the requested resource"""

    log_level = logging.WARNING

    def __init__(
        self,
        message: str = "Insufficient permissions",
        resource: Optional[str] = None,
        user_message: Optional[str] = None,
        **kwargs
    ):
        self.resource = resource
        super().__init__(
            message=message,
            user_message=user_message or f"You don't have permission to access {resource or 'this resource'}.",
            context=_merge_context(kwargs, {"resource": resource}),
            **kwargs
        )


class AccessDeniedError(AuthorizationError):
    """Deck is neither owned by, public to, nor shared with the user"""

    def __init__(self, deck_id: str, **kwargs):
        self.deck_id = deck_id
        super().__init__(
            message=f"Access to deck {deck_id} denied",
            resource=f"deck {deck_id}",
            user_message="You don't have access to this deck.",
            **kwargs
        )


# ==========================================
# Shop Economy Errors
# ==========================================

class EconomyError(StudyQuestError):
    """Base class for rejected shop operations (never mutate the profile)"""

    log_level = logging.WARNING


class InsufficientXPError(EconomyError):
    """Profile XP is below the item's cost"""

    def __init__(self, required: int, available: int, item_id: Optional[str] = None, **kwargs):
        self.required = required
        self.available = available
        self.item_id = item_id
        super().__init__(
            message=f"Insufficient XP: {required} required, {available} available",
            user_message=f"You need {required} XP to purchase this item.",
            context=_merge_context(kwargs, {"required": required, "available": available, "item_id": item_id}),
            **kwargs
        )


class ItemNotOwnedError(EconomyError):
    """Equip/unequip of an item the user never purchased"""

    def __init__(self, item_id: str, **kwargs):
        self.item_id = item_id
        super().__init__(
            message=f"Item {item_id} is not owned",
            user_message="You need to purchase this item before equipping it.",
            context=_merge_context(kwargs, {"item_id": item_id}),
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(StudyQuestError):
    """Environment settings are missing or out of range"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="StudyQuest is not configured correctly. Please contact an administrator.",
            context=_merge_context(kwargs, {"config_key": config_key}),
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> StudyQuestError:
    """
    Wrap external exceptions (psycopg, etc.) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate StudyQuestError subclass

    Example:
        try:
            await cur.execute(query)
        except psycopg.Error as e:
            raise wrap_external_exception(
                e,
                operation="commit_purchase",
                user_id="user-1",
                context={"item_id": "item-1"}
            )
    """
    # psycopg is only needed by the postgres backend
    import psycopg

    if isinstance(error, StudyQuestError):
        return error

    # Database errors
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
            context=context,
            cause=error
        )

    # Generic fallback
    return DatabaseError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
