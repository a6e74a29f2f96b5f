from typing import Optional

from pydantic import BaseModel


class ProblemResponse(BaseModel):
    """Problem details body returned by the HTTP surface on client errors."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    instance: Optional[str] = None
    requestId: Optional[str] = None

    @classmethod
    def invalid_key(cls, detail: str, instance: Optional[str] = None) -> "ProblemResponse":
        return cls(title="Invalid Poll Key", status=422, detail=detail, instance=instance)

    @classmethod
    def unknown_key(cls, key: str, instance: Optional[str] = None) -> "ProblemResponse":
        return cls(
            title="Poll Not Found",
            status=404,
            detail=f"No poll has been started for key '{key}'",
            instance=instance,
        )
