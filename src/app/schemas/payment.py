from pydantic import BaseModel, ConfigDict


class CheckoutSession(BaseModel):
    url: str
    session_id: str


class PaymentVerifyRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str | None = None


class PaymentStatus(BaseModel):
    has_paid: bool
