"""
wagerledger: settle player account operations against match payout rates.

The package folds a rate stream and a transaction stream into per-player
ledgers, tracks accounts that attempted invalid operations, and reports
legitimate players, illegitimate players, and the operator aggregate.
"""

from importlib.metadata import PackageNotFoundError, version

try:  # pragma: no cover - exercised in packaging workflows
    __version__ = version("wagerledger")
except PackageNotFoundError:  # pragma: no cover - local editable installs
    __version__ = "0.0.0"

_EXPORTS = {
    # Core engine
    "Ledger": ".ledger",
    "MatchCatalog": ".catalog",
    "Player": ".player",
    "SettlementMode": ".player",
    "ViolationKind": ".player",
    # Records
    "parse_record": ".records",
    "ParseError": ".records",
    "RecordKind": ".records",
    # Reporting
    "LedgerReport": ".report",
    "build_report": ".report",
    "render_report": ".report",
    "persist_report_tables": ".report",
    # Pipeline
    "run_pipeline": ".pipeline",
    "process_files": ".pipeline",
    # Configuration
    "get_config": ".config",
    "load_run_config": ".configuration",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> object:  # pragma: no cover - thin lazy importer
    from importlib import import_module

    target_module = _EXPORTS.get(name)
    if not target_module:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    module = import_module(target_module, __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


def __dir__() -> list[str]:  # pragma: no cover - trivial
    return sorted(list(globals().keys()) + __all__)
