from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List

from ..config import CrawlConfig, DEDUP_SCOPES
from ..utils.logging import setup_logging
from ..utils.loader import load_symbol
from ..utils.parsing import SAME_SITE_MODES, normalize_domain
from ..engines.base import CrawlReport
from ..export.base import Exporter

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Discover product pages on e-commerce sites")
    p.add_argument("domains", nargs="*", help="Seed domains, e.g. shop.example.com (space-separated)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--max-depth", type=int, default=None, help="Max crawl depth, inclusive (default from config)")
    p.add_argument("--max-concurrency", type=int, default=None,
                   help="Worker count for the pooled engine (default from config)")
    p.add_argument("--retries", type=int, default=None, help="Fetch attempts per URL (default from config)")
    p.add_argument("--retry-backoff", type=float, default=None, help="Seconds between fetch attempts")
    p.add_argument("--dedup-scope", choices=DEDUP_SCOPES, default=None,
                   help="Share the visited set per seed domain or across the whole run")
    p.add_argument("--same-site", choices=SAME_SITE_MODES, default=None,
                   help="How links are judged to belong to the seed site")
    p.add_argument("--engine", type=str, default=None, help="Engine dotted path (module:ClassName)")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--output", type=str, default=None, help="Output file path")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    return p


def _load_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig.from_env()

    if args.domains:
        cfg.domains = [normalize_domain(d) for d in args.domains if d.strip()]
    if args.max_depth is not None:
        cfg.max_depth = args.max_depth
    if args.max_concurrency is not None:
        cfg.max_concurrency = args.max_concurrency
    if args.retries is not None:
        cfg.retries = args.retries
    if args.retry_backoff is not None:
        cfg.retry_backoff = args.retry_backoff
    if args.dedup_scope:
        cfg.dedup_scope = args.dedup_scope
    if args.same_site:
        cfg.same_site = args.same_site
    if args.engine:
        cfg.engine = args.engine
    if args.exporter:
        cfg.exporter = args.exporter
    if args.output:
        cfg.output_path = args.output

    cfg.validate()
    return cfg


def run_cli(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        cfg = _load_config(args)
    except (OSError, TypeError, ValueError) as exc:
        parser.error(str(exc))

    logger.debug("Config: %s", cfg.to_dict())

    # Dynamic engine + exporter loading so upgrades don't require code edits.
    engine_cls = load_symbol(cfg.engine)
    exporter_cls = load_symbol(cfg.exporter)

    async def _run() -> CrawlReport:
        engine = engine_cls(cfg)
        return await engine.crawl()

    report: CrawlReport = asyncio.run(_run())

    exporter: Exporter = exporter_cls()
    try:
        exporter.export(report.discovered, cfg.output_path)
    except OSError as exc:
        logger.error("Failed to write results to %s: %s", cfg.output_path, exc)
        return 1

    logger.info("Visited: %s | Products: %s | Failures: %s | Output: %s",
                report.visited_count,
                report.product_count,
                len(report.failures),
                cfg.output_path)
    return 0
