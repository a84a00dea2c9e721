from typing import Optional

from pydantic import BaseModel


class Mention(BaseModel):
    """A free-text player reference attached to a content record."""

    row_id: int  # Primary key of the catalog row
    content_id: int
    name: str
    value: Optional[str] = None  # Resolved player id(s), None until identified
