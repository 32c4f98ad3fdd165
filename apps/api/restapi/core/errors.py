from typing import Optional


class AppError(Exception):
    """
    Base error for everything the API knows how to render.

    `message` is safe to show to clients, `developer_message` carries the
    technical detail, `code` is a stable identifier for the error kind.
    """

    status_code = 500
    code = "US-000000"
    default_message = "internal error"

    def __init__(
        self,
        developer_message: str = "",
        message: Optional[str] = None,
        code: Optional[str] = None,
    ) -> None:
        self.message = message or self.default_message
        self.developer_message = developer_message
        if code is not None:
            self.code = code
        super().__init__(developer_message or self.message)

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "developer_message": self.developer_message,
            "code": self.code,
        }


class InvalidArgument(AppError):
    status_code = 400
    code = "US-000001"
    default_message = "invalid argument"


class NotFound(AppError):
    status_code = 404
    code = "US-000003"
    default_message = "not found"


class PersistenceError(AppError):
    status_code = 500
    code = "US-000004"
    default_message = "storage failure"


class EncodingError(AppError):
    status_code = 500
    code = "US-000005"
    default_message = "failed to encode identifier"


class ConfigError(Exception):
    pass
