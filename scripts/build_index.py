"""
Build the title index and report on it.

This script:
1) Loads movies from data/movies.jsonl (or the built-in seed catalog)
2) Builds the title index
3) Verifies the index invariants
4) Logs stats, the most common prefixes and a few sample queries

Usage:
    python -m scripts.build_index [prefix ...]

The index itself is not saved; the API rebuilds it at startup.
"""

import sys  # sample prefixes from the command line
import time  # measure step timings

from loguru import logger  # console logging

from movie_explorer.autocomplete import Autocompleter  # suggestions
from movie_explorer.data_loader import DataLoader  # data ingestion
from movie_explorer.search_engine import TitleSearchEngine  # ranked search
from movie_explorer.settings import get_settings  # configuration
from movie_explorer.title_index import TitleIndex  # prefix tree


def main(prefixes=None):
	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Build Title Index")
	logger.info("=" * 60)

	settings = get_settings()  # env-driven configuration

	# 1) Load data
	logger.info("[1/4] Loading movies...")
	movies = DataLoader().load_catalog(settings.data_path)  # read dataset
	logger.info(f"[OK] Loaded {len(movies)} movies")  # confirm count

	# 2) Build the index
	logger.info("[2/4] Building title index...")
	t0 = time.time()  # start timer
	index = TitleIndex(exact_weights=settings.exact_weights)
	index.insert_all(movies)  # bulk insert
	logger.info(f"[OK] Indexed {index.size()} titles in {(time.time() - t0) * 1000:.2f} ms")  # report

	# 3) Verify invariants
	logger.info("[3/4] Verifying index...")
	index.verify()  # raises IndexCorrupted on failure
	logger.info("[OK] All invariants hold")

	# 4) Report
	logger.info("[4/4] Stats")
	for name, value in index.stats().to_dict().items():
		logger.info(f"  {name}: {value}")
	for prefix, weight in index.most_common_prefixes(10):
		logger.info(f"  prefix '{prefix}' ({weight} titles)")

	engine = TitleSearchEngine(index)
	completer = Autocompleter(index)
	for prefix in prefixes or ["the", "in"]:
		titles = [m.title for m in engine.search(prefix, limit=5)]
		logger.info(f"  search '{prefix}': {titles}")
		logger.info(f"  suggest '{prefix}': {completer.autocomplete(prefix, limit=5)}")

	logger.info("=" * 60)


if __name__ == '__main__':
	main(sys.argv[1:])  # invoke builder
