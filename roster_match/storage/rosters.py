# roster_match/storage/rosters.py
from typing import Dict, List, NamedTuple, Optional

from loguru import logger
from postgrest import APIResponse
from supabase import AsyncClient

from roster_match.models.enums import League
from roster_match.models.team import Team, TeamMember


class RosterSource(NamedTuple):
    table: str
    short_name_column: str


# Each league keeps its players in its own table, MLB names the short name differently
ROSTER_SOURCES: Dict[League, RosterSource] = {
    League.NBA: RosterSource("nba_player", "abbr_name"),
    League.NHL: RosterSource("nhl_player", "abbr_name"),
    League.MLB: RosterSource("mlb_player", "preferred_name"),
}


def _jersey_number(raw) -> Optional[str]:
    return None if raw is None else str(raw)


async def fetch_team_roster(
    client: AsyncClient, team: Team, schema: str = "sportradar"
) -> List[TeamMember]:
    """Loads the players of one team from its league's player table.

    Teams from any other league get an empty roster.
    """
    try:
        league = League(team.league)
    except ValueError:
        logger.debug(f"No roster source for league {team.league!r} ({team.name}).")
        return []

    source = ROSTER_SOURCES[league]
    response: APIResponse = (
        await client.schema(schema)
        .table(source.table)
        .select(f"guid, full_name, {source.short_name_column}, jersey_number")
        .eq("team_guid", str(team.guid))
        .execute()
    )

    members = []
    for row in response.data:
        short_name = row.get(source.short_name_column)
        members.append(
            TeamMember(
                id=row["guid"],
                full_name=row.get("full_name"),
                short_name=short_name,
                preferred_name=short_name if league is League.MLB else None,
                jersey_number=_jersey_number(row.get("jersey_number")),
            )
        )
    return members


async def attach_rosters(
    client: AsyncClient, teams: List[Team], schema: str = "sportradar"
) -> List[Team]:
    """Fetches and attaches the roster of every team, one team at a time."""
    for team in teams:
        team.players = await fetch_team_roster(client, team, schema=schema)
    loaded = sum(1 for team in teams if team.players)
    logger.info(f"Loaded rosters for {loaded} of {len(teams)} teams.")
    return teams
