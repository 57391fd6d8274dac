import argparse
import asyncio
import sys

from ..engine.dates import parse_date
from ..logger import get_logger
from ..storage import build_store
from .pipeline import IngestionPipeline, JsonFileSource, rebuild_user_index

logger = get_logger()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m highscores.ingest',
        description='Store a day of parsed leaderboards and update the all-time record',
    )
    parser.add_argument('games_file', nargs='?', help='JSON boards produced by the page scraper')
    parser.add_argument('--date', type=parse_date, help='snapshot date (YYYY-MM-DD), defaults to today in Pacific time')
    parser.add_argument('--rebuild-users', action='store_true', help='only rebuild users.json from stored snapshots')
    args = parser.parse_args(argv)
    if not args.games_file and not args.rebuild_users:
        parser.error('games_file is required unless --rebuild-users is given')
    return args


async def run(args) -> int:
    store = build_store()
    try:
        if args.rebuild_users:
            await rebuild_user_index(store, as_of=args.date)
        else:
            await IngestionPipeline(store, JsonFileSource(args.games_file)).run(on=args.date)
        return 0
    except Exception as e:
        logger.error(f"Ingestion failed: {e}")
        return 1
    finally:
        await store.close()


def main(argv=None):
    sys.exit(asyncio.run(run(parse_args(argv))))


if __name__ == '__main__':
    main()
