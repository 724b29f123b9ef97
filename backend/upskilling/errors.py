"""Typed application errors.

Every error carries the HTTP status it maps to and a client-facing
`message()`; `str(error)` holds the longer detail. The exception handlers
in `main.py` rely only on that capability, so services and stores raise
these without knowing anything about HTTP.
"""


class AppError(Exception):
    """Base class for errors the API turns into a `{message, details}` body."""
    status_code = 500

    def __init__(self, msg: str = "Ocorreu um erro interno no servidor."):
        super().__init__(msg)
        self.msg = msg

    def message(self) -> str:
        return self.msg


class NotFoundError(AppError):
    """A row addressed by id does not exist."""
    status_code = 404

    def __init__(self, resource: str, id: int):
        self.resource = resource
        self.id = id
        super().__init__(f"{resource} não encontrado(a) com ID: {id}")

    def message(self) -> str:
        return f"{self.resource} não encontrado(a)."


class ConflictError(AppError):
    """A uniqueness rule was violated, e.g. an email already registered."""
    status_code = 409


class BusinessRuleError(AppError):
    """A cross-entity precondition failed; the request is unprocessable."""
    status_code = 422


class ValidationError(AppError):
    """Malformed or out-of-range request shape, rejected before any service call."""
    status_code = 400

    def __init__(self, details: str, msg: str = "Dados de entrada inválidos."):
        super().__init__(details)
        self.msg = msg


class StorageError(AppError):
    """Unanticipated database failure.

    The detail is logged server-side; callers only see the generic message.
    """
    status_code = 500

    def message(self) -> str:
        return "Ocorreu um erro interno no servidor."
