"""
Data models for PUBG API responses.

The PUBG API speaks JSON:API, so every response wraps its payload in a
top-level ``data`` member. The models only cover the fields the client
actually shows. ``from_dict`` is strict about structure: a body that does
not have the expected shape raises ``KeyError``, ``TypeError`` or
``ValueError`` instead of producing a half-empty object.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

T = TypeVar("T", bound="Decodable")


class Decodable(Protocol):
    """Anything the cache client can decode a response body into."""

    @classmethod
    def from_dict(cls: type[T], data: Any) -> T:
        ...


def _require_mapping(data: Any, name: str) -> dict:
    if not isinstance(data, dict):
        raise TypeError(f"{name} must be an object, got {type(data).__name__}")
    return data


def _require_list(data: Any, name: str) -> list:
    if not isinstance(data, list):
        raise TypeError(f"{name} must be an array, got {type(data).__name__}")
    return data


def _require_id(data: dict, name: str) -> str:
    value = data["id"]
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name}.id must be a non-empty string")
    return value


@dataclass(frozen=True)
class MatchReference:
    """A pointer to a match inside a player's relationships."""

    id: str
    type: str = "match"

    def to_dict(self) -> dict:
        return {"id": self.id, "type": self.type}

    @classmethod
    def from_dict(cls, data: Any) -> "MatchReference":
        data = _require_mapping(data, "match reference")
        return cls(id=_require_id(data, "match reference"), type=data.get("type") or "match")


@dataclass
class PlayerAttributes:
    """Attributes block of a player."""

    name: str | None = None
    shard_id: str | None = None

    def to_dict(self) -> dict:
        return {"name": self.name, "shardId": self.shard_id}

    @classmethod
    def from_dict(cls, data: Any) -> "PlayerAttributes":
        data = _require_mapping(data, "attributes")
        return cls(name=data.get("name"), shard_id=data.get("shardId"))


@dataclass
class PlayerData:
    """One element of the ``data`` array of a player search."""

    id: str
    attributes: PlayerAttributes = field(default_factory=PlayerAttributes)
    matches: list[MatchReference] = field(default_factory=list)

    @property
    def name(self) -> str | None:
        return self.attributes.name

    def match_ids(self, limit: int | None = 25) -> list[str]:
        """Return the ids of the player's recent matches, newest first.

        Args:
            limit: Maximum number of ids to return. ``None`` returns all.
        """
        ids = [m.id for m in self.matches]
        return ids if limit is None else ids[:limit]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "attributes": self.attributes.to_dict(),
            "relationships": {"matches": {"data": [m.to_dict() for m in self.matches]}},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "PlayerData":
        data = _require_mapping(data, "player")

        attributes = PlayerAttributes()
        if data.get("attributes") is not None:
            attributes = PlayerAttributes.from_dict(data["attributes"])

        matches: list[MatchReference] = []
        relationships = data.get("relationships")
        if relationships is not None:
            relationships = _require_mapping(relationships, "relationships")
            matches_rel = relationships.get("matches")
            if matches_rel is not None:
                matches_rel = _require_mapping(matches_rel, "relationships.matches")
                matches = [
                    MatchReference.from_dict(item)
                    for item in _require_list(matches_rel.get("data") or [], "matches.data")
                ]

        return cls(id=_require_id(data, "player"), attributes=attributes, matches=matches)


@dataclass
class PlayerResponse:
    """Response of ``GET /shards/{shard}/players?filter[playerNames]=...``."""

    data: list[PlayerData] = field(default_factory=list)

    def first(self) -> PlayerData | None:
        """Return the first player found, if any."""
        return self.data[0] if self.data else None

    def to_dict(self) -> dict:
        return {"data": [p.to_dict() for p in self.data]}

    @classmethod
    def from_dict(cls, data: Any) -> "PlayerResponse":
        data = _require_mapping(data, "response")
        players = _require_list(data["data"], "data")
        return cls(data=[PlayerData.from_dict(p) for p in players])


@dataclass
class MatchAttributes:
    """Attributes block of a match."""

    created_at: str | None = None
    duration: int = 0  # seconds
    game_mode: str | None = None
    map_name: str | None = None

    @property
    def duration_display(self) -> str:
        """Return the duration as ``hh:mm:ss``, or ``-`` if unknown."""
        if self.duration <= 0:
            return "-"
        hours, rest = divmod(self.duration, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def to_dict(self) -> dict:
        return {
            "createdAt": self.created_at,
            "duration": self.duration,
            "gameMode": self.game_mode,
            "mapName": self.map_name,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "MatchAttributes":
        data = _require_mapping(data, "attributes")
        duration = data.get("duration") or 0
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            raise TypeError("attributes.duration must be a number")
        if isinstance(duration, float) and not math.isfinite(duration):
            raise ValueError("attributes.duration must be finite")
        return cls(
            created_at=data.get("createdAt"),
            duration=int(duration),
            game_mode=data.get("gameMode"),
            map_name=data.get("mapName"),
        )


@dataclass
class MatchData:
    """The ``data`` node of a match response."""

    id: str
    attributes: MatchAttributes = field(default_factory=MatchAttributes)

    def to_dict(self) -> dict:
        return {"id": self.id, "attributes": self.attributes.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> "MatchData":
        data = _require_mapping(data, "match")
        attributes = MatchAttributes()
        if data.get("attributes") is not None:
            attributes = MatchAttributes.from_dict(data["attributes"])
        return cls(id=_require_id(data, "match"), attributes=attributes)


@dataclass
class MatchResponse:
    """Response of ``GET /shards/{shard}/matches/{id}``."""

    data: MatchData

    def to_dict(self) -> dict:
        return {"data": self.data.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> "MatchResponse":
        data = _require_mapping(data, "response")
        return cls(data=MatchData.from_dict(data["data"]))
