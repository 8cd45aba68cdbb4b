"""Logging setup for EmergencyClassifier.

The level comes from ClassifierConfig.log_level (LOG_LEVEL in the
environment); handlers and formats come from config/logging.yaml. Per-report
log lines carry the incident report id and, once the engine has decided, the
name of the override rule that fixed the result.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple, Union

import yaml

from config.defaults import DEFAULT_LOG_LEVEL
from config.settings import ClassifierConfig

_NAMESPACE = "emergencyclassifier"
_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "logging.yaml"
_FALLBACK_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(name: Optional[str]) -> int:
    """Map a level name such as "debug" to its logging constant.

    Unknown names resolve to INFO.
    """
    level = logging.getLevelName(str(name or DEFAULT_LOG_LEVEL).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    config: Optional[ClassifierConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> int:
    """Configure the 'emergencyclassifier' logger tree for a classifier run.

    Handlers come from the YAML file; the package logger level is always
    taken from config.log_level. Without the YAML file, basicConfig is used
    at that level.

    Args:
        config: Runtime configuration; read from the environment when omitted.
        config_path: Path to logging.yaml (defaults to config/logging.yaml).

    Returns:
        The level applied to the package logger.
    """
    config = config or ClassifierConfig()
    level = resolve_level(config.log_level)
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH

    if not path.exists():
        logging.basicConfig(level=level, format=_FALLBACK_FORMAT)
        logging.getLogger(_NAMESPACE).setLevel(level)
        return level

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    package_cfg = cfg.setdefault("loggers", {}).setdefault(_NAMESPACE, {})
    package_cfg["level"] = logging.getLevelName(level)
    logging.config.dictConfig(cfg)
    return level


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the 'emergencyclassifier' namespace.

    Args:
        name: Component name (e.g., "pipeline") or a full dotted module name.
    """
    if name == _NAMESPACE or name.startswith(f"{_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_NAMESPACE}.{name}")


class ReportContextAdapter(logging.LoggerAdapter):
    """Prefix log lines with the report id and, when set, the override rule.

    Usage:
        log = get_report_logger("pipeline", report_id="rpt-20240115-0042")
        log.with_override("electrical_fire").info("Classified as fire")
        # [rpt-20240115-0042 override=electrical_fire] Classified as fire
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        prefix = self.extra.get("report_id") or "unknown"
        override_rule = self.extra.get("override_rule")
        if override_rule:
            prefix = f"{prefix} override={override_rule}"
        return f"[{prefix}] {msg}", kwargs

    @property
    def report_id(self) -> str:
        return self.extra.get("report_id") or "unknown"

    def with_override(self, override_rule: Optional[str]) -> "ReportContextAdapter":
        """Return an adapter for the same report that also names the override rule."""
        return ReportContextAdapter(
            self.logger, {"report_id": self.report_id, "override_rule": override_rule}
        )


def get_report_logger(
    name: str,
    report_id: str,
    override_rule: Optional[str] = None,
) -> ReportContextAdapter:
    """Get a logger adapter bound to one incident report.

    Args:
        name: Component name.
        report_id: Identifier of the incident report being classified.
        override_rule: Name of the override rule that decided the result, if any.
    """
    return ReportContextAdapter(
        get_logger(name), {"report_id": report_id, "override_rule": override_rule}
    )
