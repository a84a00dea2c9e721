# roster_match/storage/supabase_client.py
from typing import Any, Dict, Iterable, List, Optional, Sequence

from loguru import logger
from postgrest import APIResponse
from supabase import AsyncClient, create_async_client

from roster_match.config.settings import TeamPatch
from roster_match.models.content import ContentLink
from roster_match.models.mention import Mention
from roster_match.models.team import Team

MENTION_TABLE = "content_title_cat"
TEAM_TABLE = "team_full"
CONTENT_TABLE = "content_full"

PLAYER_CATEGORY = "Player"
DEFAULT_BATCH_SIZE = 30


async def initialize_supabase(url: str, key: str) -> AsyncClient:
    """Creates the async Supabase client used for every catalog query."""
    key_snippet = f"{key[:5]}...{key[-5:]}" if key else "None"
    logger.debug(f"Initializing Async Supabase client for {url} (key {key_snippet})")
    # Connection failures are fatal for the run, so nothing is caught here
    client: AsyncClient = await create_async_client(url, key)
    logger.success("Async Supabase client initialized successfully.")
    return client


async def fetch_unidentified_mentions(
    client: AsyncClient,
    limit: int = DEFAULT_BATCH_SIZE,
    schema: str = "public",
) -> List[Mention]:
    """Reads a batch of player mentions that have no resolved value yet."""
    response: APIResponse = (
        await client.schema(schema)
        .table(MENTION_TABLE)
        .select("id, cid, name, value")
        .eq("category", PLAYER_CATEGORY)
        .is_("value", "null")
        .order("id")
        .limit(limit)
        .execute()
    )
    mentions = [
        Mention(
            row_id=row["id"],
            content_id=row["cid"],
            name=row["name"],
            value=row.get("value"),
        )
        for row in response.data
    ]
    logger.info(f"Fetched {len(mentions)} unidentified player mentions.")
    return mentions


def apply_team_patches(teams: List[Team], patches: Iterable[TeamPatch]) -> List[Team]:
    """Appends overlay teams whose name is missing from the loaded directory."""
    for patch in patches:
        if all(team.name != patch.name for team in teams):
            logger.debug(f"Team '{patch.name}' missing from {TEAM_TABLE}, adding overlay record.")
            teams.append(Team.from_patch(patch))
    return teams


async def fetch_teams(
    client: AsyncClient,
    patches: Iterable[TeamPatch] = (),
    schema: str = "public",
) -> List[Team]:
    """Loads every team with a SportRadar GUID, then applies the overlay."""
    response: APIResponse = (
        await client.schema(schema)
        .table(TEAM_TABLE)
        .select("id, sr_guid, name, sr_alias, sport_luid_code")
        .not_.is_("sr_guid", "null")
        .execute()
    )
    teams = [
        Team(
            id=row["id"],
            guid=row["sr_guid"],
            name=row["name"],
            alias=row.get("sr_alias"),
            league=row.get("sport_luid_code"),
        )
        for row in response.data
    ]
    teams = apply_team_patches(teams, patches)
    logger.info(f"Loaded {len(teams)} teams.")
    return teams


def _chunks(values: Sequence[int], size: int) -> Iterable[List[int]]:
    for start in range(0, len(values), size):
        yield list(values[start : start + size])


def _team_id(raw: Optional[Any]) -> int:
    return int(raw) if raw else 0


async def fetch_content_links(
    client: AsyncClient,
    content_ids: Iterable[int],
    chunk_size: int = 100,
    schema: str = "public",
) -> List[ContentLink]:
    """Loads home/visitor team ids for the given content ids.

    Rows with a missing (null or zero) team on either side are dropped, and
    only the first row per content id is kept.
    """
    unique_ids = list(dict.fromkeys(content_ids))
    if not unique_ids:
        logger.warning("No content ids supplied, skipping content lookup.")
        return []

    links: Dict[int, ContentLink] = {}
    for chunk in _chunks(unique_ids, chunk_size):
        response: APIResponse = (
            await client.schema(schema)
            .table(CONTENT_TABLE)
            .select("cid, home_id, visitor_id")
            .in_("cid", chunk)
            .execute()
        )
        for row in response.data:
            link = ContentLink(
                content_id=row["cid"],
                home_team_id=_team_id(row.get("home_id")),
                away_team_id=_team_id(row.get("visitor_id")),
            )
            # If HomeID or VisitorID is missing, the content cannot be resolved
            if link.home_team_id == 0 or link.away_team_id == 0:
                logger.debug(f"Content {link.content_id} has no home/visitor team, dropping.")
                continue
            links.setdefault(link.content_id, link)

    logger.info(f"Fetched team links for {len(links)} of {len(unique_ids)} content items.")
    return list(links.values())


async def update_mention_value(
    client: AsyncClient, row_id: int, value: str, schema: str = "public"
) -> None:
    """Stores the resolved player id(s) on a catalog row (plain overwrite)."""
    await (
        client.schema(schema)
        .table(MENTION_TABLE)
        .update({"value": value})
        .eq("id", row_id)
        .execute()
    )
    logger.debug(f"Updated row {row_id} with value {value}")
