# backend/services/errors.py
"""
Typed errors raised by the inventory core.

Every class carries a stable, machine-readable ``code``. The HTTP layer maps
the class to a status code and returns ``{"code": ..., "detail": ...}``;
callers should branch on the type or the code, never on the message.

    InventoryError
    +-- NotFound             referenced goods/entity does not exist
    +-- ValidationError      malformed input, rejected before any write
    +-- UniquenessConflict   code allocation lost a race and retries ran out
    |   +-- SequenceExhausted    partition counter passed its fixed width
    +-- StorageFailure       datastore unavailable or statement failed
"""


class InventoryError(Exception):
    code = "INVENTORY_ERROR"
    status_code = 500

    def __init__(self, message: str = "", **details):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.details = details


class NotFound(InventoryError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found", entity=entity, entity_id=str(entity_id))
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(InventoryError):
    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(message, field=field)
        self.field = field


class UniquenessConflict(InventoryError):
    code = "UNIQUENESS_CONFLICT"
    status_code = 409


class SequenceExhausted(UniquenessConflict):
    code = "SEQUENCE_EXHAUSTED"


class StorageFailure(InventoryError):
    code = "STORAGE_FAILURE"
    status_code = 500

    def __init__(self, operation: str):
        # Driver messages stay in the server log, never in the error itself
        super().__init__("Internal storage error", operation=operation)
        self.operation = operation
