from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal

from roster_match.config.settings import TeamPatch


class TeamMember(BaseModel):
    """A coach, staff member or player on a team roster."""

    # Roster payloads sent to the matching service use PascalCase keys
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    id: UUID
    full_name: Optional[str] = None
    short_name: Optional[str] = None
    preferred_name: Optional[str] = None
    jersey_number: Optional[str] = None


class Team(BaseModel):
    """Represents a team and, once loaded, its roster."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    id: int  # Numeric id in the catalog database
    guid: UUID  # Stable SportRadar id
    name: Optional[str] = None
    market: Optional[str] = None
    alias: Optional[str] = None
    abbreviation: Optional[str] = None
    league: Optional[str] = None
    coaches: Optional[List[TeamMember]] = None
    staff: Optional[List[TeamMember]] = None
    players: Optional[List[TeamMember]] = None

    @classmethod
    def from_patch(cls, patch: TeamPatch) -> "Team":
        return cls(
            id=patch.id,
            guid=patch.guid,
            name=patch.name,
            alias=patch.alias,
            league=patch.league,
        )

    def roster_json(self) -> str:
        """Compact JSON used inside the matching prompt."""
        return self.model_dump_json(by_alias=True)
