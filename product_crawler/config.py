from __future__ import annotations

from dataclasses import dataclass, field, asdict, fields
from typing import List, Optional, Dict, Any
from pathlib import Path
import os
import json
import re

from .version import CONFIG_SCHEMA_VERSION
from .utils.http import DEFAULT_USER_AGENT
from .utils.parsing import SAME_SITE_MODES, normalize_domain

DEDUP_SCOPES = ("domain", "global")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


# JSON value shapes accepted per config key: (check, description for errors).
_FILE_FIELD_TYPES = {
    "schema_version": (_is_int, "an integer"),
    "domains": (_is_str_list, "a list of strings"),
    "max_depth": (_is_int, "an integer"),
    "max_concurrency": (_is_int, "an integer"),
    "retries": (_is_int, "an integer"),
    "retry_backoff": (_is_number, "a number"),
    "request_timeout": (_is_number, "a number"),
    "handshake_timeout": (_is_number, "a number"),
    "user_agent": (lambda v: isinstance(v, str), "a string"),
    "dedup_scope": (lambda v: isinstance(v, str), "a string"),
    "same_site": (lambda v: isinstance(v, str), "a string"),
    "product_patterns": (lambda v: v is None or _is_str_list(v), "null or a list of strings"),
    "engine": (lambda v: isinstance(v, str), "a string"),
    "exporter": (lambda v: isinstance(v, str), "a string"),
    "output_path": (lambda v: isinstance(v, str), "a string"),
}


@dataclass
class CrawlConfig:
    """
    Canonical configuration object passed throughout the system.
    Keep it dataclass-only (no heavy deps) to stay upgrade-friendly.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    # Seed domains: scheme-less host, optionally with path/query.
    domains: List[str] = field(default_factory=list)
    max_depth: int = 2
    max_concurrency: int = 10
    # Total attempts per URL, with a fixed sleep between them.
    retries: int = 3
    retry_backoff: float = 2.0
    request_timeout: float = 30.0
    handshake_timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    # "domain": one dedup store per seed domain; "global": one for the whole run.
    dedup_scope: str = "domain"
    # "host": host-suffix match; "substring": domain string anywhere in the link.
    same_site: str = "host"
    # None means the built-in product patterns.
    product_patterns: Optional[List[str]] = None
    # Dotted paths for engine/exporter to allow runtime swapping without code changes.
    engine: str = "product_crawler.engines.pool_engine:WorkerPoolCrawlEngine"
    exporter: str = "product_crawler.export.json_exporter:JSONExporter"
    output_path: str = "output/product_urls.json"

    def __post_init__(self) -> None:
        if isinstance(self.domains, str):
            raise ValueError("domains must be a list of seed domains, not a single string")
        self.domains = [normalize_domain(d) for d in self.domains if d and d.strip()]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """
        Build config from environment variables (all optional).
        """
        raw = os.getenv("CRAWLER_DOMAINS", "")
        domains = [d.strip() for d in raw.split(",") if d.strip()]

        defaults = cls()

        def _get(name: str, default: Any) -> str:
            return os.getenv(name, str(default))

        return cls(
            domains=domains,
            max_depth=int(_get("CRAWLER_MAX_DEPTH", defaults.max_depth)),
            max_concurrency=int(_get("CRAWLER_MAX_CONCURRENCY", defaults.max_concurrency)),
            retries=int(_get("CRAWLER_RETRIES", defaults.retries)),
            retry_backoff=float(_get("CRAWLER_RETRY_BACKOFF", defaults.retry_backoff)),
            request_timeout=float(_get("CRAWLER_REQUEST_TIMEOUT", defaults.request_timeout)),
            handshake_timeout=float(_get("CRAWLER_HANDSHAKE_TIMEOUT", defaults.handshake_timeout)),
            user_agent=_get("CRAWLER_USER_AGENT", defaults.user_agent),
            dedup_scope=_get("CRAWLER_DEDUP_SCOPE", defaults.dedup_scope),
            same_site=_get("CRAWLER_SAME_SITE", defaults.same_site),
            engine=_get("CRAWLER_ENGINE", defaults.engine),
            exporter=_get("CRAWLER_EXPORTER", defaults.exporter),
            output_path=_get("CRAWLER_OUTPUT_PATH", defaults.output_path),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Supports schema migration for future versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: config must be a JSON object")
        known = {fld.name for fld in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"{path}: unknown config keys: {', '.join(unknown)}")
        for key, value in data.items():
            check, expected = _FILE_FIELD_TYPES[key]
            if not check(value):
                raise ValueError(f"{path}: {key} must be {expected}, got {json.dumps(value)}")
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.domains:
            raise ValueError("domains cannot be empty; provide at least one seed domain.")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.max_concurrency <= 0:
            raise ValueError("max_concurrency must be > 0")
        if self.retries < 1:
            raise ValueError("retries must be >= 1")
        if self.retry_backoff < 0:
            raise ValueError("retry_backoff must be >= 0")
        if self.request_timeout <= 0 or self.handshake_timeout <= 0:
            raise ValueError("timeouts must be > 0")
        if self.dedup_scope not in DEDUP_SCOPES:
            raise ValueError(f"dedup_scope must be one of {DEDUP_SCOPES}, got {self.dedup_scope!r}")
        if self.same_site not in SAME_SITE_MODES:
            raise ValueError(f"same_site must be one of {SAME_SITE_MODES}, got {self.same_site!r}")
        for pattern in self.product_patterns or []:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid product pattern {pattern!r}: {exc}") from exc
        # Validate output path parent exists or is creatable
        parent = Path(self.output_path).parent
        parent.mkdir(parents=True, exist_ok=True)


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    migrated = dict(raw)
    migrated.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    if not _is_int(migrated["schema_version"]):
        raise ValueError(f"config schema_version must be an integer, got {migrated['schema_version']!r}")
    if migrated["schema_version"] > CONFIG_SCHEMA_VERSION:
        raise ValueError(
            f"config schema_version {migrated['schema_version']} is newer than "
            f"supported version {CONFIG_SCHEMA_VERSION}"
        )
    return migrated
