"""Validated session configuration shared by the CLI and the HTTP front-end."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .board import Player, RuleMode

if TYPE_CHECKING:
    from .match import MatchState


DIFFICULTY_STEP = 5
DEFAULT_DIFFICULTY = 85


# ---------- Player types ----------


class Human(BaseModel):
    """Moves come from the presentation layer."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["human"] = "human"


class Computer(BaseModel):
    """Moves come from the AI engine."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["computer"] = "computer"
    difficulty: int = Field(
        default=DEFAULT_DIFFICULTY,
        ge=0,
        le=100,
        description="Percentage chance of choosing the optimal move",
    )

    @field_validator("difficulty")
    @classmethod
    def ensure_difficulty_step(cls, value: int) -> int:
        if value % DIFFICULTY_STEP:
            raise ValueError(
                f"Unsupported difficulty {value}. "
                f"Choose a multiple of {DIFFICULTY_STEP} between 0 and 100."
            )
        return value


PlayerConfig = Annotated[Union[Human, Computer], Field(discriminator="kind")]


# ---------- Ending policies ----------


class BestOfRounds(BaseModel):
    """Stop after ``limit`` rounds, draws included."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["best_of_rounds"] = "best_of_rounds"
    limit: int = Field(ge=1)

    def is_complete(self, state: "MatchState") -> bool:
        return state.rounds_played >= self.limit


class BestOfDecisiveRounds(BaseModel):
    """Stop after ``limit`` rounds that produced a winner."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["best_of_decisive_rounds"] = "best_of_decisive_rounds"
    limit: int = Field(ge=1)

    def is_complete(self, state: "MatchState") -> bool:
        return state.decisive_rounds >= self.limit


class FirstToScore(BaseModel):
    """Stop as soon as either player has ``limit`` wins."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["first_to_score"] = "first_to_score"
    limit: int = Field(ge=1)

    def is_complete(self, state: "MatchState") -> bool:
        return max(state.wins.values()) >= self.limit


class Unlimited(BaseModel):
    """Never completes on its own; the session ends when the user quits."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unlimited"] = "unlimited"

    def is_complete(self, state: "MatchState") -> bool:
        return False


EndingPolicy = Annotated[
    Union[BestOfRounds, BestOfDecisiveRounds, FirstToScore, Unlimited],
    Field(discriminator="kind"),
]

ENDING_KINDS = {
    "best_of_rounds": BestOfRounds,
    "best_of_decisive_rounds": BestOfDecisiveRounds,
    "first_to_score": FirstToScore,
    "unlimited": Unlimited,
}


# ---------- Session ----------


class MatchConfig(BaseModel):
    """Everything a match needs, validated once at session start."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    player_x: PlayerConfig = Field(default_factory=Human, alias="playerX")
    player_o: PlayerConfig = Field(default_factory=Computer, alias="playerO")
    mode: RuleMode = RuleMode.NORMAL
    ending: EndingPolicy = Field(default_factory=Unlimited)
    first_player: Literal["X", "O"] = Field(default="X", alias="firstPlayer")
    seed: Optional[int] = Field(
        default=None, description="Seed for every random choice in the match"
    )

    def player(self, mark: Player) -> Union[Human, Computer]:
        return self.player_x if mark == "X" else self.player_o


def ending_from_options(kind: str, limit: Optional[int]) -> EndingPolicy:
    """Build an ending policy from flat CLI options."""
    try:
        policy = ENDING_KINDS[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown ending policy {kind!r}") from exc
    if policy is Unlimited:
        return Unlimited()
    return policy(limit=limit if limit is not None else 1)
