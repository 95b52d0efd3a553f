"""
Market data provider factory (config-driven).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from stockcompare.config import settings
from stockcompare.domain.errors import ConfigurationError
from stockcompare.infrastructure.market_data.provider_chain import ChainedSeriesProvider, NamedProvider
from stockcompare.infrastructure.market_data.types import SeriesProvider
from stockcompare.infrastructure.market_data.yahoo_chart_provider import YahooChartProvider
from stockcompare.infrastructure.market_data.yfinance_provider import YFinanceProvider

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).resolve().parents[3] / "config" / "app.yml"


def _load_app_config(config_file: Optional[Path] = None) -> Dict:
    path = config_file or DEFAULT_CONFIG_FILE
    if not path.exists():
        logger.info("No %s found, using environment market data settings", path)
        return {}
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    return data.get("market_data", {}) or {}


def _build_provider(name: str, app_config: Dict) -> SeriesProvider:
    name = (name or "").lower()
    timeout = float(app_config.get("timeout_seconds", settings.MARKET_DATA_TIMEOUT_SECONDS))
    cache_ttl = int(app_config.get("cache_ttl", settings.MARKET_DATA_CACHE_TTL))

    if name == "yahoo":
        yahoo_cfg = app_config.get("yahoo", {}) or {}
        return YahooChartProvider(
            base_url=yahoo_cfg.get("base_url", settings.YAHOO_CHART_BASE_URL),
            timeout_seconds=timeout,
            cache_ttl_seconds=cache_ttl,
        )
    if name == "yfinance":
        return YFinanceProvider(timeout_seconds=timeout, cache_ttl_seconds=cache_ttl)
    raise ConfigurationError(f"Unknown market data provider: {name}")


def get_series_provider(config_file: Optional[Path] = None) -> ChainedSeriesProvider:
    app_config = _load_app_config(config_file)
    provider_name = app_config.get("provider", settings.MARKET_DATA_PROVIDER)
    fallback_names = app_config.get("fallback_providers", []) or []

    providers: List[NamedProvider] = [
        NamedProvider(provider_name.lower(), _build_provider(provider_name, app_config))
    ]
    for fallback in fallback_names:
        if fallback and fallback.lower() != provider_name.lower():
            try:
                providers.append(NamedProvider(fallback.lower(), _build_provider(fallback, app_config)))
            except ConfigurationError as exc:
                logger.warning("Skipping fallback provider: %s", exc)

    logger.info("Market data providers: %s", ", ".join(p.name for p in providers))
    return ChainedSeriesProvider(providers)


def get_search_provider(provider: SeriesProvider) -> YahooChartProvider:
    """Symbol search always goes to Yahoo; reuse the chain's Yahoo client if present."""
    if isinstance(provider, ChainedSeriesProvider):
        for named in provider.providers:
            if isinstance(named.provider, YahooChartProvider):
                return named.provider
    if isinstance(provider, YahooChartProvider):
        return provider
    return YahooChartProvider(
        base_url=settings.YAHOO_CHART_BASE_URL,
        timeout_seconds=settings.MARKET_DATA_TIMEOUT_SECONDS,
        cache_ttl_seconds=settings.MARKET_DATA_CACHE_TTL,
    )
