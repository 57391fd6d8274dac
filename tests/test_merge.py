import json
from datetime import date

import pytest

from highscores.engine.merge import merge, parse_all_time
from highscores.models.data import AllTimeEntry, AllTimeGame, AllTimeRecord

from conftest import block, game

DAY1 = date(2024, 3, 1)
DAY2 = date(2024, 3, 2)


def record_with(*entries, avatar='old.png', on=DAY1):
    scores = [
        AllTimeEntry(rank=i + 1, username=u, score=s, achieved_on=d)
        for i, (u, s, d) in enumerate(entries)
    ]
    return AllTimeRecord(last_updated=on, games={'pirates': AllTimeGame(name='Pirates', top_avatar=avatar, scores=scores)})


def as_tuples(record, game_id='pirates'):
    return [(e.rank, e.username, e.score, e.achieved_on) for e in record.games[game_id].scores]


def test_cold_start_seeds_from_highscores():
    incoming = {'pirates': game(
        highscores=block(('Ariel', 900), ('Belle', 800), avatar='ariel.png'),
        today=block(('Jasmine', 300), avatar='jasmine.png'),
    )}

    result = merge(None, incoming, DAY1)

    assert result.last_updated == DAY1
    assert as_tuples(result) == [(1, 'Ariel', 900, DAY1), (2, 'Belle', 800, DAY1), (3, 'Jasmine', 300, DAY1)]
    assert result.games['pirates'].name == 'Pirates of the Caribbean'
    assert result.games['pirates'].top_avatar == 'ariel.png'


def test_higher_score_replaces_and_stamps_date():
    current = record_with(('Ariel', 900, DAY1), ('Belle', 800, DAY1))
    incoming = {'pirates': game(today=block(('Belle', 1000), avatar='belle.png'))}

    result = merge(current, incoming, DAY2)

    assert as_tuples(result) == [(1, 'Belle', 1000, DAY2), (2, 'Ariel', 900, DAY1)]
    assert result.games['pirates'].top_avatar == 'belle.png'


def test_lower_or_equal_score_keeps_existing_entry():
    current = record_with(('Ariel', 900, DAY1), ('Belle', 800, DAY1))
    incoming = {'pirates': game(
        highscores=block(('Ariel', 900), ('Belle', 800)),
        today=block(('Belle', 700)),
    )}

    result = merge(current, incoming, DAY2)

    assert as_tuples(result) == [(1, 'Ariel', 900, DAY1), (2, 'Belle', 800, DAY1)]
    assert result.last_updated == DAY2


def test_tie_never_changes_achieved_on():
    current = record_with(('Ariel', 900, DAY1))
    incoming = {'pirates': game(today=block(('Ariel', 900), avatar='new.png'))}

    result = merge(current, incoming, DAY2)

    assert as_tuples(result) == [(1, 'Ariel', 900, DAY1)]
    assert result.games['pirates'].top_avatar == 'old.png'


def test_today_overrides_highscores_only_when_strictly_better():
    current = record_with(('Ariel', 500, DAY1))
    incoming = {'pirates': game(
        highscores=block(('Ariel', 600)),
        today=block(('Ariel', 650)),
    )}

    result = merge(current, incoming, DAY2)

    assert as_tuples(result) == [(1, 'Ariel', 650, DAY2)]


def test_keeps_top_fifty_with_contiguous_ranks():
    current = record_with(*[(f'player{i}', 1000 - i, DAY1) for i in range(50)])
    incoming = {'pirates': game(today=block(*[(f'new{i}', 2000 - i * 50) for i in range(10)]))}

    result = merge(current, incoming, DAY2)
    scores = result.games['pirates'].scores

    assert len(scores) == 50
    assert [e.rank for e in scores] == list(range(1, 51))
    assert all(a.score >= b.score for a, b in zip(scores, scores[1:]))
    assert len({e.username.casefold() for e in scores}) == 50
    assert scores[0].username == 'new0'


def test_ties_keep_insertion_order():
    current = record_with(('Ariel', 900, DAY1), ('Belle', 800, DAY1))
    incoming = {'pirates': game(today=block(('Jasmine', 900)))}

    result = merge(current, incoming, DAY2)

    assert [e.username for e in result.games['pirates'].scores] == ['Ariel', 'Jasmine', 'Belle']


def test_usernames_compare_case_insensitively_and_keep_first_casing():
    current = record_with(('Ariel', 900, DAY1))
    incoming = {'pirates': game(today=block(('ARIEL', 950)))}

    result = merge(current, incoming, DAY2)

    assert as_tuples(result) == [(1, 'Ariel', 950, DAY2)]


def test_merge_is_idempotent():
    current = record_with(('Ariel', 900, DAY1), ('Belle', 800, DAY1), ('Jasmine', 800, DAY1))
    incoming = {
        'pirates': game(
            highscores=block(('Ariel', 900), ('Mulan', 850), avatar='ariel.png'),
            today=block(('Mulan', 990), ('Belle', 800), avatar='mulan.png'),
        ),
        'jungle-cruise': game(
            name='Jungle Cruise',
            highscores=block(('Tiana', 300), avatar='tiana.png'),
            today=block(('Moana', 310), avatar='moana.png'),
        ),
    }

    once = merge(current, incoming, DAY2)
    twice = merge(once, incoming, DAY2)

    assert twice == once
    assert json.dumps(twice.to_json_dict()) == json.dumps(once.to_json_dict())


def test_cold_start_is_idempotent():
    incoming = {'pirates': game(
        highscores=block(('Ariel', 900), avatar='ariel.png'),
        today=block(('Jasmine', 300), avatar='jasmine.png'),
    )}

    once = merge(None, incoming, DAY1)

    assert merge(once, incoming, DAY1) == once


def test_new_leader_takes_avatar_of_the_block_they_lead():
    current = record_with(('Ariel', 900, DAY1))
    incoming = {'pirates': game(
        highscores=block(('Mulan', 1200), avatar='mulan.png'),
        today=block(('Belle', 100), avatar='belle.png'),
    )}

    result = merge(current, incoming, DAY2)

    assert result.games['pirates'].scores[0].username == 'Mulan'
    assert result.games['pirates'].top_avatar == 'mulan.png'


def test_missing_avatar_falls_back_to_stored():
    current = record_with(('Ariel', 900, DAY1))
    incoming = {'pirates': game(today=block(('Belle', 1000)))}

    result = merge(current, incoming, DAY2)

    assert result.games['pirates'].top_avatar == 'old.png'


def test_games_absent_from_incoming_are_preserved():
    current = record_with(('Ariel', 900, DAY1))

    result = merge(current, {}, DAY2)

    assert as_tuples(result) == [(1, 'Ariel', 900, DAY1)]
    assert result.last_updated == DAY2


def test_does_not_mutate_current():
    current = record_with(('Ariel', 900, DAY1))
    before = current.model_copy(deep=True)

    merge(current, {'pirates': game(today=block(('Belle', 1000)))}, DAY2)

    assert current == before


@pytest.mark.parametrize('raw', ['{not json', '{"lastUpdated": "2024-03-01"}', '[]'])
def test_parse_all_time_rejects_malformed_documents(raw, caplog):
    with caplog.at_level('WARNING', logger='highscores'):
        assert parse_all_time(raw) is None
    assert 'Malformed all-time record' in caplog.text


def test_parse_all_time_reads_persisted_document():
    raw = json.dumps(record_with(('Ariel', 900, DAY1)).to_json_dict())

    record = parse_all_time(raw)

    assert as_tuples(record) == [(1, 'Ariel', 900, DAY1)]
    assert record.games['pirates'].top_avatar == 'old.png'
    assert '"achievedOn": "2024-03-01"' in raw


def test_merge_with_record_missing_games_cold_starts(caplog):
    incoming = {'pirates': game(highscores=block(('Ariel', 900)))}

    with caplog.at_level('WARNING', logger='highscores'):
        result = merge({'lastUpdated': '2024-03-01'}, incoming, DAY2)

    assert as_tuples(result) == [(1, 'Ariel', 900, DAY2)]
    assert 'Malformed all-time record' in caplog.text
