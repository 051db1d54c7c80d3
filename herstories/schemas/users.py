from pydantic import BaseModel


class UserSession(BaseModel):
    """Authenticated caller; issued by the auth layer, never created here."""

    model_config = {"frozen": True}

    user_id: str
    email: str | None = None
