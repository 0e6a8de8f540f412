from http import HTTPStatus

# ruff: noqa
from fastcrud.exceptions.http_exceptions import (
    CustomException,
    BadRequestException,
    NotFoundException,
    ForbiddenException,
    UnauthorizedException,
    UnprocessableEntityException,
    DuplicateValueException,
    RateLimitException,
)


class ConflictException(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(status_code=HTTPStatus.CONFLICT, detail=detail)


class PaymentRequiredException(CustomException):
    def __init__(self, detail: str | None = "Payment required to access this content"):
        super().__init__(status_code=HTTPStatus.PAYMENT_REQUIRED, detail=detail)


class AccountBannedException(ForbiddenException):
    def __init__(self, detail: str | None = "Account banned"):
        super().__init__(detail=detail)


class CooldownException(RateLimitException):
    """Raised while an email is inside its resend window."""

    def __init__(self, retry_after: int, detail: str | None = None):
        super().__init__(detail=detail or f"Please wait {retry_after} seconds before requesting another code")
        self.retry_after = retry_after
        self.headers = {"Retry-After": str(retry_after)}


class PaymentProviderException(CustomException):
    def __init__(self, detail: str | None = "Payment provider error"):
        super().__init__(status_code=HTTPStatus.BAD_GATEWAY, detail=detail)


class EmailNotConfiguredException(CustomException):
    def __init__(self, detail: str | None = "SMTP credentials not configured"):
        super().__init__(status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=detail)


class EmailDeliveryException(CustomException):
    def __init__(self, detail: str | None = "Failed to send email"):
        super().__init__(status_code=HTTPStatus.BAD_GATEWAY, detail=detail)
