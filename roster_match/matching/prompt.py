from typing import Any, Dict, NamedTuple

from roster_match.models.team import Team

BASE_INSTRUCTIONS = """Help me identify a player from the roster of two teams. I will send you a single text in the user content.
This text may contain:
- a part of the player's name,
- a text and number combination with a reference to any of the teams and a jersey number,
- several of the previous combinations, separated by spaces.
I will send you here a json-like text with two rosters with detailed information of each team's players and coaches.
Simply identify the "id" attribute of the most likely person (or people, if several were identified from a space
separated input) and return it as simple string or a comma-separated string if more than one person was found.
Take these considerations for each case: - For case 1: When trying to match text, it is ok to find approximations;
- For case 2: split the input between text and number, and try to match the text part with the initial of the team name,
market or alias, then within that team use the numerical part to find the person using only the exact jersey number match;
- For case 3: for every space separated part, consider the previous instructions for the other cases.
If no suitable person is found, return an empty string. These are the rosters:
{ "Team1": <Team1Roster>, "Team2": <Team2Roster> }"""


class GenerationOptions(NamedTuple):
    model: str = "gpt-4o"
    max_completion_tokens: int = 3500
    temperature: float = 1.0
    top_p: float = 1.0


def build_instructions(home: Team, away: Team) -> str:
    """System message with both rosters embedded, home team first."""
    return BASE_INSTRUCTIONS.replace("<Team1Roster>", home.roster_json()).replace(
        "<Team2Roster>", away.roster_json()
    )


def build_request_body(
    home: Team,
    away: Team,
    mention_text: str,
    options: GenerationOptions = GenerationOptions(),
) -> Dict[str, Any]:
    """Chat completion request asking the model to match one mention."""
    return {
        "model": options.model,
        "messages": [
            {"role": "system", "content": build_instructions(home, away)},
            {"role": "user", "content": mention_text},
        ],
        "max_completion_tokens": options.max_completion_tokens,
        "temperature": options.temperature,
        "top_p": options.top_p,
        "response_format": {"type": "text"},
    }
