"""Fold one day's scores into the durable all-time leaderboard.

The all-time record keeps each player's best observed score per game, with
the date it was first seen at that value. Entries are re-ranked from their
sort position on every merge; ranks carried in by the page are never trusted.
"""
import json
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..config import leaderboard
from ..logger import get_logger
from ..models.data import (
    AllTimeEntry,
    AllTimeGame,
    AllTimeRecord,
    GameSnapshot,
    Period,
    ScoreEntry,
)

logger = get_logger()


def parse_all_time(raw: Union[str, bytes, dict, None]) -> Optional[AllTimeRecord]:
    """Validate a persisted all-time document.

    A document that does not decode, or lacks the games mapping, reads as
    absent so the next merge starts from an empty record.
    """
    if raw is None:
        return None
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        return AllTimeRecord.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Malformed all-time record, starting from empty: {e}")
        return None


def rank_entries(entries: Iterable[AllTimeEntry], limit: int) -> List[AllTimeEntry]:
    """Sort by score descending (stable on ties), cut to limit, rank 1..n"""
    ordered = sorted(entries, key=lambda e: -e.score)[:limit]
    return [e.model_copy(update={'rank': i + 1}) for i, e in enumerate(ordered)]


def _merge_scores(existing: Iterable[AllTimeEntry], candidates: Iterable[ScoreEntry], on: date) -> List[AllTimeEntry]:
    by_name: Dict[str, AllTimeEntry] = {}
    for entry in existing:
        key = entry.username.casefold()
        held = by_name.get(key)
        if held is None or entry.score > held.score:
            by_name[key] = entry

    for entry in candidates:
        key = entry.username.casefold()
        held = by_name.get(key)
        if held is None:
            by_name[key] = AllTimeEntry(
                rank=entry.rank,
                username=entry.username,
                score=entry.score,
                achieved_on=on,
            )
        elif entry.score > held.score:
            # first-seen casing stays canonical
            by_name[key] = held.model_copy(update={'score': entry.score, 'achieved_on': on})
    return list(by_name.values())


def _top_avatar(ranked: List[AllTimeEntry], game: GameSnapshot, on: date, previous: Optional[str]) -> Optional[str]:
    if not ranked or ranked[0].achieved_on != on:
        return previous

    leader = ranked[0].username.casefold()
    today = game.block(Period.TODAY)
    highscores = game.block(Period.HIGHSCORES)
    for block in (today, highscores):
        if block.top_avatar and block.scores and block.scores[0].username.casefold() == leader:
            return block.top_avatar
    return today.top_avatar or highscores.top_avatar or previous


def merge(
    current: Union[AllTimeRecord, dict, None],
    incoming: Mapping[str, GameSnapshot],
    on: date,
    limit: Optional[int] = None,
) -> AllTimeRecord:
    """Return a new all-time record with one day's scores folded in.

    Candidates are the day's highscores entries followed by its today
    entries. A candidate replaces the stored entry only when its score is
    strictly greater, so re-merging the same day is a no-op.
    """
    limit = limit or leaderboard.all_time_limit
    if current is not None and not isinstance(current, AllTimeRecord):
        current = parse_all_time(current)

    if current is None:
        logger.info(f"No all-time record found, seeding from highscores of {on}")
        games: Dict[str, AllTimeGame] = {}
    else:
        games = dict(current.games)

    for game_id, game in incoming.items():
        candidates = [*game.block(Period.HIGHSCORES).scores, *game.block(Period.TODAY).scores]
        existing = games.get(game_id)
        if existing is None:
            # a new game starts from the site's own all-time column; today's
            # entries are folded in too so a repeat run changes nothing
            merged = _merge_scores([], candidates, on)
            name, previous_avatar = game.name, None
        else:
            merged = _merge_scores(existing.scores, candidates, on)
            name, previous_avatar = existing.name or game.name, existing.top_avatar

        ranked = rank_entries(merged, limit)
        games[game_id] = AllTimeGame(
            name=name,
            top_avatar=_top_avatar(ranked, game, on, previous_avatar),
            scores=ranked,
        )
        logger.debug(f"Merged {len(merged)} candidates for {game_id}, kept {len(ranked)}")

    return AllTimeRecord(last_updated=on, games=games)
