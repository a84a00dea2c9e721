from typing import Dict, Iterable, List, Tuple

from loguru import logger

from roster_match.models.content import ContentLink
from roster_match.models.mention import Mention
from roster_match.models.team import Team


class TeamAssignmentError(Exception):
    """Raised when a content link references a team missing from the directory."""

    pass


def index_teams_by_id(teams: Iterable[Team]) -> Dict[int, Team]:
    """Numeric id -> team, the first team wins on duplicate ids."""
    index: Dict[int, Team] = {}
    for team in teams:
        index.setdefault(team.id, team)
    return index


def index_teams_by_guid(teams: Iterable[Team]) -> Dict[str, Team]:
    """Stable id -> team, the first team wins on duplicate ids."""
    index: Dict[str, Team] = {}
    for team in teams:
        index.setdefault(str(team.guid), team)
    return index


def _lookup(index: Dict[int, Team], team_id: int, side: str) -> Team:
    try:
        return index[team_id]
    except KeyError:
        raise TeamAssignmentError(f"no {side} team with id {team_id}") from None


def assign_team_guids(
    links: Iterable[ContentLink], teams: Iterable[Team]
) -> Tuple[Dict[int, ContentLink], List[int]]:
    """Resolves both sides of every link to a stable team id.

    Returns the resolved links keyed by content id and the content ids that
    could not be resolved. Failures are logged, never raised.
    """
    index = index_teams_by_id(teams)
    resolved: Dict[int, ContentLink] = {}
    skipped: List[int] = []

    for link in links:
        if link.content_id in resolved or link.content_id in skipped:
            continue  # one link per content id
        try:
            home = _lookup(index, link.home_team_id, "home")
            away = _lookup(index, link.away_team_id, "away")
        except TeamAssignmentError as e:
            logger.warning(
                f"Error assigning team GUIDs for content {link.content_id} - "
                f"{link.home_team_id} / {link.away_team_id}: {e}"
            )
            if link.content_id not in skipped:
                skipped.append(link.content_id)
            continue

        resolved[link.content_id] = link.model_copy(
            update={"home_team_guid": home.guid, "away_team_guid": away.guid}
        )
        logger.debug(
            f"Content {link.content_id} - Home {link.home_team_id} ({home.guid}) "
            f"vs Away {link.away_team_id} ({away.guid})"
        )

    return resolved, skipped


def partition_mentions(
    mentions: Iterable[Mention],
    resolved: Dict[int, ContentLink],
    skipped: Iterable[int] = (),
) -> Tuple[List[Mention], List[int]]:
    """Splits mentions into those ready for matching and skipped content ids.

    A mention is ready only when its content id has a resolved link. Content
    ids without any link are added to the skip list after the ones already
    known, keeping first-seen order.
    """
    ready: List[Mention] = []
    skipped_ids: List[int] = list(dict.fromkeys(skipped))

    for mention in mentions:
        if mention.content_id in resolved:
            ready.append(mention)
            continue
        logger.info(
            f"Skipping player {mention.name} with CID {mention.content_id} due to missing team data."
        )
        if mention.content_id not in skipped_ids:
            skipped_ids.append(mention.content_id)

    return ready, skipped_ids
