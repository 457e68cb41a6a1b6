"""Health check response models."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Health status string (e.g., "healthy").
        subscribers: Currently connected update stream subscribers.
    """

    status: str
    subscribers: int = 0
