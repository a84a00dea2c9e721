from typing import List

from pydantic import BaseModel, Field


class RunSummary(BaseModel):
    """Counts reported at the end of an identification run."""

    identified: int = 0
    total: int = 0
    skipped: List[int] = Field(default_factory=list)

    def lines(self) -> List[str]:
        return [
            f"Identified {self.identified} players out of {self.total} total players.",
            "Player identification process completed.",
            f"Skipped {','.join(str(cid) for cid in self.skipped)}.",
        ]
