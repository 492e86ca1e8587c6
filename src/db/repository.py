"""Protocol repositories, one per aggregate (implemented on top of any EventStore)"""

from typing import Protocol
from uuid import UUID

from src.core.shared_types import TeamSide
from src.softball.game import Game
from src.softball.inning import InningState
from src.softball.lineup import TeamLineup


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    def find_by_id(self, game_id: UUID) -> Game | None:
        """Get game by ID, if record exists."""
        ...

    def save(self, game: Game) -> Game:
        """Store the pending events of the game and return it with those events committed."""
        ...


class InningStateRepository(Protocol):
    def find_by_id(self, inning_state_id: UUID) -> InningState | None: ...

    def find_by_game_id(self, game_id: UUID) -> InningState | None:
        """The (single) inning state tracking a game."""
        ...

    def save(self, inning_state: InningState) -> InningState: ...


class TeamLineupRepository(Protocol):
    def find_by_id(self, lineup_id: UUID) -> TeamLineup | None: ...

    def find_by_game_id(self, game_id: UUID) -> list[TeamLineup]: ...

    def find_by_game_id_and_side(self, game_id: UUID, side: TeamSide) -> TeamLineup | None: ...

    def save(self, lineup: TeamLineup) -> TeamLineup: ...
