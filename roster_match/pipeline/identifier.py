import asyncio
from typing import Awaitable, Callable, Dict, Iterable, Optional

from loguru import logger
from supabase import AsyncClient

from roster_match.config.settings import AppSettings, TeamPatch
from roster_match.linking.assigner import (
    assign_team_guids,
    index_teams_by_guid,
    partition_mentions,
)
from roster_match.matching.client import MatchingService, MatchingServiceError
from roster_match.matching.parser import parse_identifiers
from roster_match.matching.prompt import GenerationOptions, build_request_body
from roster_match.models.content import ContentLink
from roster_match.models.mention import Mention
from roster_match.models.summary import RunSummary
from roster_match.models.team import Team
from roster_match.storage.rosters import attach_rosters
from roster_match.storage.supabase_client import (
    fetch_content_links,
    fetch_teams,
    fetch_unidentified_mentions,
    update_mention_value,
)


class PlayerIdentifier:
    """Resolves a batch of player mentions against the rosters of their teams.

    Store failures propagate and end the run. Matching failures only leave the
    affected mention unresolved.
    """

    def __init__(
        self,
        client: AsyncClient,
        matcher: MatchingService,
        *,
        batch_size: int = 30,
        content_id_chunk_size: int = 100,
        team_patches: Iterable[TeamPatch] = (),
        catalog_schema: str = "public",
        roster_schema: str = "sportradar",
        generation: GenerationOptions = GenerationOptions(),
        request_delay: float = 0.9,
        dry_run: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.matcher = matcher
        self.batch_size = batch_size
        self.content_id_chunk_size = content_id_chunk_size
        self.team_patches = list(team_patches)
        self.catalog_schema = catalog_schema
        self.roster_schema = roster_schema
        self.generation = generation
        self.request_delay = request_delay
        self.dry_run = dry_run
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        client: AsyncClient,
        matcher: MatchingService,
        **overrides,
    ) -> "PlayerIdentifier":
        options = dict(
            batch_size=settings.batch_size,
            content_id_chunk_size=settings.content_id_chunk_size,
            team_patches=settings.team_patches,
            catalog_schema=settings.catalog_schema,
            roster_schema=settings.roster_schema,
            generation=GenerationOptions(
                model=settings.llm_model,
                max_completion_tokens=settings.max_completion_tokens,
                temperature=settings.temperature,
                top_p=settings.top_p,
            ),
            request_delay=settings.request_delay_seconds,
        )
        options.update(overrides)
        return cls(client, matcher, **options)

    async def run(self) -> RunSummary:
        # 1. Get players that have not been identified
        mentions = await fetch_unidentified_mentions(
            self.client, limit=self.batch_size, schema=self.catalog_schema
        )
        summary = RunSummary(total=len(mentions))
        if not mentions:
            logger.info("No unidentified players found.")
            return summary

        # 2. Get team data
        teams = await fetch_teams(
            self.client, self.team_patches, schema=self.catalog_schema
        )

        # 3. Get the teams of every content item in the batch
        links = await fetch_content_links(
            self.client,
            [mention.content_id for mention in mentions],
            chunk_size=self.content_id_chunk_size,
            schema=self.catalog_schema,
        )

        # 4. Assign team GUIDs and set aside what cannot be resolved
        resolved, unresolvable = assign_team_guids(links, teams)
        ready, summary.skipped = partition_mentions(mentions, resolved, unresolvable)

        # 5. Rosters
        teams = await attach_rosters(self.client, teams, schema=self.roster_schema)
        teams_by_guid = index_teams_by_guid(teams)

        # 6. Match every remaining mention, one request at a time
        for mention in ready:
            player_ids = await self.identify_mention(
                mention, resolved[mention.content_id], teams_by_guid
            )
            if player_ids:
                summary.identified += 1

        for line in summary.lines():
            logger.info(line)
        return summary

    async def identify_mention(
        self,
        mention: Mention,
        link: ContentLink,
        teams_by_guid: Dict[str, Team],
    ) -> Optional[str]:
        """Asks the matching service for the mention and stores a valid answer."""
        try:
            home = teams_by_guid[str(link.home_team_guid)]
            away = teams_by_guid[str(link.away_team_guid)]
            body = build_request_body(home, away, mention.name, self.generation)
            logger.debug(f"Identifying player: {mention.name} ({home.name} vs {away.name})")
            try:
                answer = await self.matcher.identify(body)
            finally:
                await self._sleep(self.request_delay)  # Stay under the API rate limit
            player_ids = parse_identifiers(answer)
        except MatchingServiceError as e:
            logger.error(f"Error identifying player {mention.name}: {e}")
            return None
        except Exception as e:
            logger.exception(f"Unexpected error identifying player {mention.name}: {e}")
            return None

        if not player_ids:
            logger.info(f"No player identified for {mention.name}")
            return None

        if self.dry_run:
            logger.info(f"[dry-run] Would store {player_ids} on row {mention.row_id}")
        else:
            await update_mention_value(
                self.client, mention.row_id, player_ids, schema=self.catalog_schema
            )
        mention.value = player_ids
        logger.success(f"Identified {player_ids} as player {mention.name}")
        return player_ids


async def identify_players(
    settings: AppSettings,
    client: AsyncClient,
    matcher: MatchingService,
    **overrides,
) -> RunSummary:
    """Runs one identification batch configured from settings."""
    identifier = PlayerIdentifier.from_settings(settings, client, matcher, **overrides)
    return await identifier.run()
