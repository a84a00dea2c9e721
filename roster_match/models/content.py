from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class ContentLink(BaseModel):
    """The two teams that took part in a content item."""

    content_id: int
    home_team_id: int
    away_team_id: int
    # Filled in by the team assigner
    home_team_guid: Optional[UUID] = None
    away_team_guid: Optional[UUID] = None
