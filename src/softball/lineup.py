"""
The TeamLineup aggregate: batting order of one team, with the substitution history of every slot.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Self
from uuid import UUID

from src.core.exceptions import DomainError, InvalidEventError
from src.core.shared_types import PlayerId, TeamSide
from src.softball.events import (
    DomainEvent,
    PlayerAddedToLineup,
    PlayerSubstitutedIntoGame,
    TeamLineupCreated,
)

MAX_BATTING_SLOTS = 20
MAX_TEAM_NAME_LENGTH = 50
MAX_PLAYER_NAME_LENGTH = 100


@dataclass(frozen=True)
class SlotHistory:
    """One stint of a player in a batting slot. exited_inning is None while the player is still in."""

    player_id: PlayerId
    entered_inning: int
    exited_inning: Optional[int] = None
    was_starter: bool = False
    is_reentry: bool = False

    @property
    def is_active(self) -> bool:
        return self.exited_inning is None


@dataclass(frozen=True)
class BattingSlot:
    position: int
    player_id: PlayerId
    history: tuple[SlotHistory, ...]

    @classmethod
    def with_starter(cls, position: int, player_id: PlayerId) -> Self:
        return cls(
            position=position,
            player_id=player_id,
            history=(SlotHistory(player_id, entered_inning=1, was_starter=True),),
        )

    @property
    def starter(self) -> PlayerId:
        return self.history[0].player_id

    def has_played(self, player_id: PlayerId) -> bool:
        return any(entry.player_id == player_id for entry in self.history)

    def has_reentered(self, player_id: PlayerId) -> bool:
        return any(entry.player_id == player_id and entry.is_reentry for entry in self.history)

    def substitute(self, incoming_player_id: PlayerId, inning: int, is_reentry: bool) -> Self:
        history = tuple(
            replace(entry, exited_inning=inning) if entry.is_active else entry
            for entry in self.history
        )
        history += (SlotHistory(incoming_player_id, entered_inning=inning, is_reentry=is_reentry),)
        return replace(self, player_id=incoming_player_id, history=history)


def _validate_name(label: str, name: str, max_length: int) -> None:
    if not name or not name.strip():
        raise DomainError(f"{label} cannot be empty or whitespace")
    if len(name) > max_length:
        raise DomainError(f"{label} cannot exceed {max_length} characters")


@dataclass(frozen=True)
class TeamLineup:
    # --- DOMAIN LAYER API CALLED BY THE COORDINATOR / SERVICE ---

    id: UUID
    game_id: UUID
    team_name: str
    side: TeamSide
    slots: tuple[BattingSlot, ...] = ()
    player_names: dict[PlayerId, str] = field(default_factory=dict)
    version: int = 0
    uncommitted_events: tuple[DomainEvent, ...] = ()

    @classmethod
    def create_new(cls, lineup_id: UUID, game_id: UUID, team_name: str, side: TeamSide) -> Self:
        _validate_name("Team name", team_name, MAX_TEAM_NAME_LENGTH)
        side = TeamSide(side)
        blank = cls(id=lineup_id, game_id=game_id, team_name=team_name, side=side)
        return blank._raise_event(
            TeamLineupCreated(
                game_id=str(game_id),
                lineup_id=str(lineup_id),
                team_name=team_name,
                side=side,
            )
        )

    @classmethod
    def from_events(cls, events: Iterable[DomainEvent]) -> Self:
        events = list(events)
        if not events:
            raise InvalidEventError("Cannot reconstruct lineup from an empty event stream")

        first = events[0]
        if not isinstance(first, TeamLineupCreated):
            raise InvalidEventError(f"First event must be TeamLineupCreated, got {first.event_type}")
        if any(event.game_id != first.game_id for event in events):
            raise InvalidEventError("All events must belong to the same game")

        lineup = cls(
            id=UUID(first.lineup_id),
            game_id=UUID(first.game_id),
            team_name=first.team_name,
            side=TeamSide(first.side),
        )
        for event in events[1:]:
            lineup = lineup._apply(event)
        return replace(lineup, version=len(events), uncommitted_events=())

    # --- QUERIES ---
    def active_lineup(self) -> list[BattingSlot]:
        return sorted(self.slots, key=lambda slot: slot.position)

    @property
    def batting_order_size(self) -> int:
        """Number of slots the batting order cycles through."""
        return max((slot.position for slot in self.slots), default=0)

    def find_slot(self, player_id: PlayerId) -> Optional[BattingSlot]:
        """Slot currently occupied by the player, if any."""
        return next((slot for slot in self.slots if slot.player_id == player_id), None)

    def slot_at(self, position: int) -> Optional[BattingSlot]:
        return next((slot for slot in self.slots if slot.position == position), None)

    def current_player(self, position: int) -> Optional[PlayerId]:
        slot = self.slot_at(position)
        return slot.player_id if slot else None

    def is_player_in_lineup(self, player_id: PlayerId) -> bool:
        return self.find_slot(player_id) is not None

    def player_name(self, player_id: PlayerId) -> Optional[str]:
        return self.player_names.get(player_id)

    @property
    def committed_version(self) -> int:
        return self.version - len(self.uncommitted_events)

    # --- COMMANDS ---
    def add_player(self, player_id: PlayerId, player_name: str, batting_slot: int) -> Self:
        """Put a starter into the next batting slot. Slots are filled in order, without gaps."""
        if not player_id:
            raise DomainError("Player id cannot be empty")
        _validate_name("Player name", player_name, MAX_PLAYER_NAME_LENGTH)
        self._validate_slot_number(batting_slot)
        if self.slot_at(batting_slot) is not None:
            raise DomainError(f"Batting slot {batting_slot} is already occupied")
        if batting_slot != self.batting_order_size + 1:
            raise DomainError(
                f"Batting slot {batting_slot} would leave a gap, the next open slot is {self.batting_order_size + 1}"
            )
        if self._has_played(player_id):
            raise DomainError(f"Player {player_id} is already in the lineup")

        return self._raise_event(
            PlayerAddedToLineup(
                game_id=str(self.game_id),
                lineup_id=str(self.id),
                player_id=player_id,
                player_name=player_name,
                batting_slot=batting_slot,
            )
        )

    def substitute_player(
        self,
        batting_slot: int,
        outgoing_player_id: PlayerId,
        incoming_player_id: PlayerId,
        incoming_player_name: str,
        inning: int,
        is_reentry: bool = False,
        allow_re_entry: bool = True,
    ) -> Self:
        """
        Replace the player in a batting slot.

        Re-entry: a starter that was substituted may come back once, into their original slot,
        and only when the rules of the game allow it. Every other player who left the game is out for good.
        """
        self._validate_slot_number(batting_slot)
        if isinstance(inning, bool) or not isinstance(inning, int) or inning < 1:
            raise DomainError("Inning must be 1 or greater")
        if not incoming_player_id:
            raise DomainError("Player id cannot be empty")
        _validate_name("Player name", incoming_player_name, MAX_PLAYER_NAME_LENGTH)

        slot = self.slot_at(batting_slot)
        if slot is None:
            raise DomainError(f"Batting slot {batting_slot} is not occupied")
        if slot.player_id != outgoing_player_id:
            raise DomainError(f"Player {outgoing_player_id} is not in batting slot {batting_slot}")
        if self.is_player_in_lineup(incoming_player_id):
            raise DomainError(f"Player {incoming_player_id} is already in the lineup")

        if is_reentry:
            self._validate_reentry(slot, incoming_player_id, allow_re_entry)
        elif self._has_played(incoming_player_id):
            raise DomainError(
                f"Player {incoming_player_id} already left the game and can only come back as a re-entry"
            )

        return self._raise_event(
            PlayerSubstitutedIntoGame(
                game_id=str(self.game_id),
                lineup_id=str(self.id),
                batting_slot=batting_slot,
                outgoing_player_id=outgoing_player_id,
                incoming_player_id=incoming_player_id,
                incoming_player_name=incoming_player_name,
                inning=inning,
                is_reentry=is_reentry,
            )
        )

    def mark_events_as_committed(self) -> Self:
        return replace(self, uncommitted_events=())

    # -- PRIVATE HELPERS ---
    @staticmethod
    def _validate_slot_number(batting_slot: int) -> None:
        if isinstance(batting_slot, bool) or not isinstance(batting_slot, int):
            raise DomainError(f"Batting slot must be an integer, got {batting_slot!r}")
        if not 1 <= batting_slot <= MAX_BATTING_SLOTS:
            raise DomainError(f"Batting slot must be between 1 and {MAX_BATTING_SLOTS}")

    def _has_played(self, player_id: PlayerId) -> bool:
        return any(slot.has_played(player_id) for slot in self.slots)

    def _validate_reentry(self, slot: BattingSlot, player_id: PlayerId, allow_re_entry: bool) -> None:
        if not allow_re_entry:
            raise DomainError("Re-entry is not allowed by the rules of this game")
        if not self._has_played(player_id):
            raise DomainError(f"Player {player_id} never played in this game and cannot re-enter")
        if slot.starter != player_id:
            raise DomainError("Only original starters can re-enter, and only into their original slot")
        if slot.has_reentered(player_id):
            raise DomainError(f"Player {player_id} has already used their re-entry")

    def _raise_event(self, event: DomainEvent) -> Self:
        applied = self._apply(event)
        return replace(
            applied,
            version=self.version + 1,
            uncommitted_events=self.uncommitted_events + (event,),
        )

    def _apply(self, event: DomainEvent) -> Self:
        match event:
            case TeamLineupCreated():
                return self
            case PlayerAddedToLineup(player_id=player_id, player_name=player_name, batting_slot=position):
                return replace(
                    self,
                    slots=self.slots + (BattingSlot.with_starter(position, player_id),),
                    player_names={**self.player_names, player_id: player_name},
                )
            case PlayerSubstitutedIntoGame(
                batting_slot=position,
                incoming_player_id=incoming,
                incoming_player_name=incoming_name,
                inning=inning,
                is_reentry=is_reentry,
            ):
                slots = tuple(
                    slot.substitute(incoming, inning, is_reentry) if slot.position == position else slot
                    for slot in self.slots
                )
                return replace(
                    self,
                    slots=slots,
                    player_names={**self.player_names, incoming: incoming_name},
                )
            case _:
                raise InvalidEventError(
                    f"Unsupported event type for TeamLineup reconstruction: {event.event_type}"
                )
