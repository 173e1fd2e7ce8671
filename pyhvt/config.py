"""Config-driven engine builder with lightweight validation.

JSON schema (example):

{
  "name": "aapl-2017",
  "start": "2017-01-01",
  "end": "2017-11-03",
  "data_feed": {"type": "daily_files", "root": "./data", "symbol": "AAPL"},
  "market_hours": {"open": "10:00", "last": "15:30"},
  "strategies": [{"type": "hvt", "symbol": "AAPL", "stop_loss": 0.15, "take_profit": 0.30}],
  "execution": {"type": "simulated", "initial_cash": 100000},
  "reporters": [{"type": "outcomes"}, {"type": "trade_log", "jsonl_path": "./out/trades.jsonl"}]
}
"""

import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from pyhvt.analytics import OutcomeBook, TradeLogReporter
from pyhvt.core.engine import BacktestEngine, EngineConfig
from pyhvt.core.interfaces import DataFeed, OutcomeSink, PerformanceReporter, Strategy, TradingVenue
from pyhvt.data import DailyFileBarFeed, DailyFileLocator, InMemoryBarFeed, MarketHours, parse_clock, parse_line
from pyhvt.data.locator import DEFAULT_PATTERN
from pyhvt.errors import ConfigurationError, ParseError, PersistenceError
from pyhvt.execution import SimulatedVenue
from pyhvt.strategies import ExitRules, HVTRules, PositionManager

DEFAULT_START = datetime(2017, 1, 1)
DEFAULT_END = datetime(2017, 11, 3)
DEFAULT_SYMBOL = "AAPL"


def _require(mapping: Mapping[str, Any], key: str) -> Any:
    if key not in mapping:
        raise ConfigurationError(f"Missing required config key: '{key}'")
    return mapping[key]


def _as_object(value: Any, *, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{field_name} must be an object")
    return value


def _as_object_array(value: Any, *, field_name: str) -> List[Mapping[str, Any]]:
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        raise ConfigurationError(f"{field_name} must be an array")
    return [_as_object(item, field_name=f"{field_name}[{idx}]") for idx, item in enumerate(value)]


def _parse_dt(value: Optional[str], default: Optional[datetime] = None) -> Optional[datetime]:
    if value is None:
        return default
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid datetime format: {value}") from exc


def _decimal(cfg: Mapping[str, Any], key: str, default: Decimal) -> Decimal:
    raw = cfg.get(key)
    if raw is None:
        return default
    try:
        # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
        value = Decimal(str(raw))
    except InvalidOperation as exc:
        raise ConfigurationError(f"'{key}' must be a number, got {raw!r}") from exc
    if not value.is_finite():
        raise ConfigurationError(f"'{key}' must be a finite number, got {raw!r}")
    return value


def _build_feed(cfg: Mapping[str, Any], start: datetime, end: datetime) -> DataFeed:
    feed_type = _require(cfg, "type")
    if feed_type == "daily_files":
        locator = DailyFileLocator(
            root=Path(_require(cfg, "root")),
            symbol=str(cfg.get("symbol", DEFAULT_SYMBOL)),
            pattern=str(cfg.get("pattern", DEFAULT_PATTERN)),
        )
        try:
            return DailyFileBarFeed(
                locator,
                start=_parse_dt(cfg.get("start"), start),
                end=_parse_dt(cfg.get("end"), end),
                delimiter=str(cfg.get("delimiter", ",")),
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

    if feed_type == "inmemory":
        symbol = str(cfg.get("symbol", DEFAULT_SYMBOL))
        delimiter = str(cfg.get("delimiter", ","))
        try:
            bars = [parse_line(line, symbol, delimiter) for line in _require(cfg, "lines")]
        except ParseError as exc:
            raise ConfigurationError(f"Invalid inline bar: {exc}") from exc
        return InMemoryBarFeed(bars)

    raise ConfigurationError(f"Unsupported data_feed type: {feed_type}")


def _build_market_hours(cfg: Optional[Mapping[str, Any]]) -> MarketHours:
    if cfg is None:
        return MarketHours()
    cfg = _as_object(cfg, field_name="market_hours")
    defaults = MarketHours()
    try:
        return MarketHours(
            open=parse_clock(cfg["open"]) if "open" in cfg else defaults.open,
            last=parse_clock(cfg["last"]) if "last" in cfg else defaults.last,
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def _build_execution(cfg: Mapping[str, Any]) -> SimulatedVenue:
    exec_type = _require(cfg, "type")
    if exec_type != "simulated":
        raise ConfigurationError(f"Unsupported execution type: {exec_type}")
    try:
        return SimulatedVenue(
            initial_cash=_decimal(cfg, "initial_cash", Decimal("100000")),
            slippage=_decimal(cfg, "slippage", Decimal("0")),
            commission=_decimal(cfg, "commission", Decimal("0")),
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def _build_reporters(cfgs: Optional[Sequence[Mapping[str, Any]]]) -> List[PerformanceReporter]:
    reporters: List[PerformanceReporter] = []
    for cfg in cfgs or []:
        rep_type = _require(cfg, "type")
        if rep_type == "outcomes":
            reporters.append(OutcomeBook())
        elif rep_type == "trade_log":
            jsonl = cfg.get("jsonl_path")
            sqlite = cfg.get("sqlite_path")
            try:
                reporters.append(
                    TradeLogReporter(
                        jsonl_path=Path(jsonl) if jsonl else None,
                        sqlite_path=Path(sqlite) if sqlite else None,
                    )
                )
            except PersistenceError as exc:
                raise ConfigurationError(str(exc)) from exc
        else:
            raise ConfigurationError(f"Unsupported reporter type: {rep_type}")
    return reporters


def _build_strategy(cfg: Mapping[str, Any], venue: TradingVenue, sinks: Sequence[OutcomeSink]) -> Strategy:
    strat_type = _require(cfg, "type")
    if strat_type != "hvt":
        raise ConfigurationError(f"Unsupported strategy type: {strat_type}")
    try:
        rules = HVTRules(
            volume_ratio=_decimal(cfg, "volume_ratio", HVTRules.volume_ratio),
            min_body=_decimal(cfg, "min_body", HVTRules.min_body),
        )
        exits = ExitRules(
            stop_loss=_decimal(cfg, "stop_loss", ExitRules.stop_loss),
            take_profit=_decimal(cfg, "take_profit", ExitRules.take_profit),
            fraction=_decimal(cfg, "fraction", ExitRules.fraction),
            warmup_bars=int(cfg.get("warmup_bars", ExitRules.warmup_bars)),
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    return PositionManager(
        symbol=str(cfg.get("symbol", DEFAULT_SYMBOL)),
        venue=venue,
        reporters=sinks,
        rules=rules,
        exits=exits,
        strategy_id=str(cfg.get("strategy_id", "hvt")),
    )


def load_engine_from_dict(raw: Mapping[str, Any]) -> BacktestEngine:
    """Build a BacktestEngine from an already-decoded config mapping."""

    raw = _as_object(raw, field_name="config")
    start = _parse_dt(raw.get("start"), DEFAULT_START)
    end = _parse_dt(raw.get("end"), DEFAULT_END)
    assert start is not None and end is not None

    data_feed = _build_feed(_as_object(_require(raw, "data_feed"), field_name="data_feed"), start, end)
    venue = _build_execution(_as_object(raw.get("execution", {"type": "simulated"}), field_name="execution"))
    reporters = _build_reporters(_as_object_array(raw.get("reporters", [{"type": "outcomes"}]), field_name="reporters"))
    sinks: List[OutcomeSink] = [r for r in reporters if isinstance(r, OutcomeSink)]
    strategies = [
        _build_strategy(item, venue, sinks)
        for item in _as_object_array(_require(raw, "strategies"), field_name="strategies")
    ]

    engine_cfg = EngineConfig(
        name=str(raw.get("name", "hvt")),
        start=start,
        end=end,
        enforce_order=bool(raw.get("enforce_order", True)),
    )

    return BacktestEngine(
        data_feed=data_feed,
        strategies=strategies,
        execution=venue,
        reporters=reporters,
        session_filter=_build_market_hours(raw.get("market_hours")),
        config=engine_cfg,
    )


def load_engine_from_json(path: Path | str) -> BacktestEngine:
    """Load BacktestEngine from a JSON config file with validation."""

    cfg_path = Path(path)
    try:
        raw = json.loads(cfg_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config {cfg_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {cfg_path}: {exc}") from exc
    return load_engine_from_dict(raw)


__all__ = ["load_engine_from_dict", "load_engine_from_json"]
