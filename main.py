#!/usr/bin/env python
"""
Main entry point for docsearch.
Uses Fire for CLI and Hydra for configuration management.
"""

import os
import sys
import json
import logging
import time
from pathlib import Path
import fire
import hydra
from omegaconf import DictConfig, OmegaConf
from dotenv import load_dotenv

# Load .env variables and register resolver
load_dotenv()
if not OmegaConf.has_resolver("env"):
    OmegaConf.register_new_resolver("env", os.getenv)

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from docsearch.engine import SearchEngine
from docsearch.exceptions import CrawlError

QUIT_COMMANDS = {':q', ':quit', ':exit'}


class SearchCLI:
    """CLI for docsearch."""

    def __init__(self, config_path: str = "conf", config_name: str = "config"):
        """
        Initialize CLI with configuration.

        Args:
            config_path: Path to config directory (relative to this file)
            config_name: Name of main config file
        """
        self.config_path = config_path
        self.config_name = config_name
        self.config: DictConfig = None
        self.engine: SearchEngine = None
        self.logger = None

    def _init_config(self, overrides=None):
        """Initialize Hydra configuration."""
        with hydra.initialize(version_base=None, config_path=self.config_path):
            if overrides:
                self.config = hydra.compose(config_name=self.config_name, overrides=overrides)
            else:
                self.config = hydra.compose(config_name=self.config_name)

        self._setup_logging()

    def _setup_logging(self):
        logging.basicConfig(
            level=getattr(logging, self.config.logging.level),
            format=self.config.logging.format
        )
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _build_overrides(root=None, stop_words=None, overrides=None):
        """Translate CLI flags into Hydra override strings."""
        result = []
        if root is not None:
            result.append(f"paths.root='{root}'")
        if stop_words is not None:
            result.append(f"stop_words.enabled={str(bool(stop_words)).lower()}")
        if overrides:
            if isinstance(overrides, str):
                overrides = overrides.split(',')
            result.extend(o.strip() for o in overrides if o.strip())
        return result

    def _build_engine(self) -> SearchEngine:
        """Crawl the configured root and build a fresh engine."""
        self.logger.info(f"Indexing documents under {self.config.paths.root}")
        start_time = time.time()
        try:
            engine = SearchEngine.from_config(self.config)
        except CrawlError as e:
            self.logger.error(f"Indexing failed: {e}")
            raise
        elapsed = time.time() - start_time

        print(f"Indexed {engine.document_count()} documents "
              f"({engine.term_count()} terms) in {elapsed:.2f} seconds")
        return engine

    def _get_engine(self) -> SearchEngine:
        """Get or create engine instance."""
        if self.engine is None:
            self.engine = self._build_engine()
        return self.engine

    def _print_results(self, results, elapsed_us: float, top_k=None):
        if not results:
            print("No results found.")
            return

        shown = results[:top_k] if top_k is not None else results
        for result in shown:
            print(f"  {result.doc_name} ({result.rank})")
        print(f"Found {len(results)} results in {elapsed_us:.2f} us")

    def index(self, root: str = None, stop_words: bool = None, overrides=None):
        """
        Crawl a document tree and report index statistics.

        Args:
            root: Directory to index (default: paths.root)
            stop_words: Enable stop-word filtering
            overrides: Extra Hydra overrides, comma separated
        """
        self._init_config(self._build_overrides(root, stop_words, overrides))

        self.logger.info("=" * 60)
        self.logger.info("BUILDING INDEX")
        self.logger.info("=" * 60)

        engine = self._get_engine()
        stats = engine.get_statistics()
        for key, value in stats.items():
            self.logger.info(f"  {key}: {value}")
        return stats

    def search(self, query: str, root: str = None, stop_words: bool = None,
               k: int = None, as_json: bool = False, overrides=None):
        """
        Index a document tree and run a single query.

        Args:
            query: Query string; quote phrases, e.g. '"the hair" red'
            root: Directory to index (default: paths.root)
            stop_words: Enable stop-word filtering
            k: Maximum number of results to print (default: search.top_k)
            as_json: Print the JSON result document instead of text
            overrides: Extra Hydra overrides, comma separated
        """
        self._init_config(self._build_overrides(root, stop_words, overrides))
        engine = self._get_engine()

        top_k = k if k is not None else self.config.search.get('top_k')

        if as_json:
            output = engine.query(query, top_k)
            print(json.dumps(json.loads(output), indent=2))
            return

        start_time = time.perf_counter()
        results = engine.search(query)
        elapsed_us = (time.perf_counter() - start_time) * 1e6
        self._print_results(results, elapsed_us, top_k)

    def repl(self, root: str = None, stop_words: bool = None, overrides=None):
        """
        Index a document tree and answer queries interactively.

        Commands: ':reindex' rebuilds the index, ':stats' prints statistics,
        ':quit' (or EOF) exits.

        Args:
            root: Directory to index (default: paths.root)
            stop_words: Enable stop-word filtering
            overrides: Extra Hydra overrides, comma separated
        """
        self._init_config(self._build_overrides(root, stop_words, overrides))

        print("Welcome to docsearch!")
        self._get_engine()
        print()

        top_k = self.config.search.get('top_k')

        while True:
            try:
                line = input("Enter a query: ")
            except EOFError:
                print()
                break

            line = line.strip()
            if not line:
                continue
            if line in QUIT_COMMANDS:
                break
            if line == ':reindex':
                # Queries keep using the old engine until the new one is ready
                self.engine = self._build_engine()
            elif line == ':stats':
                for key, value in self.engine.get_statistics().items():
                    print(f"  {key}: {value}")
            else:
                start_time = time.perf_counter()
                results = self.engine.search(line)
                elapsed_us = (time.perf_counter() - start_time) * 1e6
                self._print_results(results, elapsed_us, top_k)
            print()


def main():
    """Main entry point."""
    fire.Fire(SearchCLI)


if __name__ == "__main__":
    main()
