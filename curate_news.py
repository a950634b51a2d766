#!/usr/bin/env python3
"""
Entrypoint for running the news curator.

Usage:
    # Run a curation now and print the picks
    uv run python curate_news.py --run

    # Show today's curated articles
    uv run python curate_news.py --today

    # Run the daily scheduler (curates once a day at CURATION_HOUR:CURATION_MINUTE)
    uv run python curate_news.py --schedule
"""
import argparse
import sys

from news_curation.curator import CurationPipeline
from news_curation.database import get_todays_articles, init_db
from news_curation.scheduler import run_scheduler
from news_curation.tools import format_articles


def main():
    parser = argparse.ArgumentParser(
        description="Curate a daily selection of foreign policy news"
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--run",
        action="store_true",
        help="Run a curation now"
    )
    group.add_argument(
        "--today",
        action="store_true",
        help="Show today's curated articles"
    )
    group.add_argument(
        "--schedule",
        action="store_true",
        help="Run the daily scheduler until interrupted"
    )

    args = parser.parse_args()
    init_db()

    if args.schedule:
        run_scheduler()
    elif args.run:
        result = CurationPipeline().run_daily_curation()
        if not result.success:
            print(f"Curation failed: {result.error}", file=sys.stderr)
            sys.exit(1)
        print(format_articles(result.articles))
    else:
        articles = get_todays_articles()
        if not articles:
            print("No articles curated today. Run with --run first.", file=sys.stderr)
            sys.exit(1)
        print(format_articles(articles))


if __name__ == "__main__":
    main()
