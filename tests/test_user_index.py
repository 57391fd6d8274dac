import json
from datetime import date

from highscores.engine.user_index import UserDirectory, build_user_index, rebuild
from highscores.models.data import AllTimeEntry, AllTimeGame, AllTimeRecord, PeriodBlock, ScoreEntry

from conftest import block, game, snapshot

D1, D2, D3 = date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3)


def history():
    return [
        snapshot(D1,
                 pirates=game(yesterday=block(('Ariel', 500), ('Belle', 400), avatar='ariel1.png'),
                              highscores=block(('Mulan', 2000), ('Ariel', 1500), avatar='mulan.png'))),
        snapshot(D2,
                 pirates=game(yesterday=block(('Belle', 600), ('Ariel', 450), avatar='belle.png')),
                 jungle_cruise=game(name='Jungle Cruise', today=block(('Ariel', 80), avatar='ariel2.png'))),
        snapshot(D3,
                 pirates=game(today=block(('Ariel', 300), ('Belle', 200), avatar=None))),
    ]


def all_time():
    return AllTimeRecord(last_updated=D3, games={
        'pirates': AllTimeGame(name='Pirates', scores=[
            AllTimeEntry(rank=1, username='Mulan', score=2000, achieved_on=D1),
            AllTimeEntry(rank=2, username='Ariel', score=1500, achieved_on=D1),
            AllTimeEntry(rank=3, username='Ghost', score=1000, achieved_on=D1),
        ]),
        'jungle-cruise': AllTimeGame(name='Jungle Cruise', scores=[
            AllTimeEntry(rank=1, username='Belle', score=90, achieved_on=D1),
        ]),
    })


def test_best_scores_track_date_and_rank_together():
    users = rebuild(history(), all_time())

    ariel = users['Ariel'].games['pirates']
    assert (ariel.best_score, ariel.date, ariel.rank) == (1500, D1, 2)
    belle = users['Belle'].games['pirates']
    assert (belle.best_score, belle.date, belle.rank) == (600, D2, 1)


def test_avatar_is_last_first_place_sighting():
    users = rebuild(history(), None)

    assert users['Ariel'].avatar == 'ariel2.png'
    assert users['Mulan'].avatar == 'mulan.png'
    assert users['Belle'].avatar == 'belle.png'


def test_first_place_without_avatar_keeps_previous():
    users = rebuild(history(), None)

    # Ariel led D3's today block, which had no avatar
    assert users['Ariel'].avatar == 'ariel2.png'


def test_last_seen_prefers_newest_date_then_best_rank():
    users = rebuild(history(), None)

    ariel = users['Ariel']
    assert ariel.last_seen == D3
    assert (ariel.last_appearance.game, ariel.last_appearance.rank) == ('pirates', 1)

    days = [snapshot(D1,
                     pirates=game(yesterday=block(('Belle', 10), ('Ariel', 5))),
                     jungle_cruise=game(today=block(('Ariel', 7))))]
    same_day = rebuild(days, None)['Ariel']
    assert (same_day.last_appearance.game, same_day.last_appearance.rank) == ('jungle-cruise', 1)


def test_all_time_rank_only_for_tracked_games():
    users = rebuild(history(), all_time())

    assert users['Mulan'].games['pirates'].all_time_rank == 1
    assert users['Ariel'].games['pirates'].all_time_rank == 2
    assert users['Ariel'].games['jungle-cruise'].all_time_rank is None
    assert 'jungle-cruise' not in users['Belle'].games
    assert 'Ghost' not in users


def test_missing_rank_uses_position():
    day = snapshot(D1, pirates=game(yesterday=PeriodBlock(scores=[
        ScoreEntry(username='Ariel', score=10),
        ScoreEntry(username='Belle', score=5),
    ])))

    users = rebuild([day], None)

    assert users['Belle'].games['pirates'].rank == 2
    assert users['Ariel'].last_appearance.rank == 1


def test_case_variants_share_first_seen_name():
    days = [
        snapshot(D1, pirates=game(yesterday=block(('Ariel', 10)))),
        snapshot(D2, pirates=game(yesterday=block(('ARIEL', 20)))),
    ]

    users = rebuild(days, None)

    assert list(users) == ['Ariel']
    assert users['Ariel'].games['pirates'].best_score == 20


def test_rebuild_is_deterministic():
    first = build_user_index(rebuild(history(), all_time()), D3)
    second = build_user_index(rebuild(history(), all_time()), D3)

    assert json.dumps(first.to_json_dict(), indent=2) == json.dumps(second.to_json_dict(), indent=2)
    assert first.user_count == len(first.users) == 3


def test_directory_lookup_and_suggestions():
    users = rebuild(history(), None)
    directory = UserDirectory(users)

    assert directory.names == ['Ariel', 'Belle', 'Mulan']
    assert directory.get('  ariel ')[0] == 'Ariel'
    assert directory.get('nobody') is None
    assert directory.suggest('EL') == ['Ariel', 'Belle']
    assert directory.suggest('Mulan, ar') == ['Ariel']
    assert directory.suggest('a', limit=1) == ['Ariel']
    assert directory.suggest('Mulan, ') == []


def test_directory_from_missing_index_is_empty():
    directory = UserDirectory.from_index(None)

    assert len(directory) == 0
    assert directory.suggest('a') == []
