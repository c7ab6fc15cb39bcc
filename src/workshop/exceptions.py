"""
═══════════════════════════════════════════════════════════════════════════════
Workshop — Иерархия доменных ошибок (Custom Exception Hierarchy)
═══════════════════════════════════════════════════════════════════════════════

Базовый класс ``WorkshopError``; у каждой ошибки свой строковый код.
HTTP-маппинг кодов выполняется в ``workshop.main:workshop_error_handler``.

AuthorizationError и NotFoundError намеренно различаются: недоступный,
но существующий заказ даёт 403, а не 404.
"""


class WorkshopError(Exception):
    """
    Базовое исключение для всех доменных ошибок.

    Атрибуты
    ────────
        message (str):  Описание ошибки. Передаётся клиенту в JSON.
        code (str):     Строковый код. Используется для маппинга на HTTP-статус.
        details (dict): Дополнительные данные (entity, id и т.д.).
    """

    def __init__(
        self,
        message: str,
        code: str = "WORKSHOP_ERROR",
        details: dict | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(WorkshopError):
    """Ошибка аутентификации: 401 Unauthorized."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="WORKSHOP_AUTH_ERROR")


class AuthorizationError(WorkshopError):
    """Ошибка авторизации: 403 Forbidden."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="WORKSHOP_AUTHZ_ERROR")


class NotFoundError(WorkshopError):
    """Сущность не найдена: 404 Not Found."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            message=f"{entity} not found: {entity_id}",
            code="WORKSHOP_NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class ConflictError(WorkshopError):
    """Нарушение уникальности: 409 Conflict."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="WORKSHOP_CONFLICT", details=details)


class ValidationError(WorkshopError):
    """Ошибка доменной валидации: 422 Unprocessable Entity."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="WORKSHOP_VALIDATION_ERROR", details=details)


class StorageError(WorkshopError):
    """Хранилище недоступно: 503 Service Unavailable."""

    def __init__(self, message: str = "Storage unavailable", details: dict | None = None):
        super().__init__(message, code="WORKSHOP_STORAGE_ERROR", details=details)


__all__ = [
    "WorkshopError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "StorageError",
]
