import json
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from dss_auditor.core.errors import PolicyLoadError
from dss_auditor.services.engine.columns import ColumnKey
from dss_auditor.services.policy.schema import (
    PolicyMeta,
    PolicyRow,
    PolicyTable,
    QuarantinedRow,
)

logger = logging.getLogger("dss.policy")

_ROW_FIELDS = {"l1", "l2", "keywords", "actions"}


def load_policy_table_from_file(path: str) -> PolicyTable:
    """
    Read the DSS grid from JSON or YAML.
    Top level is a list of rows, or {"meta": {...}, "rows": [...]}.
    """
    p = Path(path)

    if not p.exists():
        raise PolicyLoadError(f"DSS grid file not found: {path}")

    try:
        with open(p, "r", encoding="utf-8") as f:
            if p.suffix.lower() in (".yaml", ".yml"):
                raw = yaml.safe_load(f)
            else:
                raw = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise PolicyLoadError(f"DSS grid file is not parseable: {path}: {e}") from e

    table = load_policy_table(raw, source=str(p))
    logger.info(
        "DSS grid loaded path=%s rows=%d quarantined=%d",
        p, len(table.rows), len(table.quarantined),
    )
    return table


def load_policy_table(raw: Any, *, source: Optional[str] = None) -> PolicyTable:
    meta_raw: Dict[str, Any] = {}

    if isinstance(raw, dict):
        meta_raw = raw.get("meta") or {}
        rows_raw = raw.get("rows")
    else:
        rows_raw = raw

    if not isinstance(rows_raw, list):
        raise PolicyLoadError("DSS grid must be a list of rows (or a mapping with 'rows')")

    rows, quarantined = _build_rows(rows_raw)

    try:
        meta = PolicyMeta(**{**meta_raw, "source": source or meta_raw.get("source")})
    except (TypeError, ValidationError) as e:
        raise PolicyLoadError(f"DSS grid meta is invalid: {e}") from e

    return PolicyTable(rows=tuple(rows), quarantined=tuple(quarantined), meta=meta)


def _build_rows(rows_raw: Iterable[Any]) -> Tuple[List[PolicyRow], List[QuarantinedRow]]:
    rows: List[PolicyRow] = []
    quarantined: List[QuarantinedRow] = []

    for idx, raw_row in enumerate(rows_raw):
        if not isinstance(raw_row, dict):
            quarantined.append(QuarantinedRow(index=idx, reason="row is not a mapping", raw=raw_row))
            continue

        try:
            row = PolicyRow(**_normalize_row(raw_row))
        except (ValueError, ValidationError) as e:
            reason = _first_error(e)
            logger.warning("DSS grid row quarantined index=%d reason=%s", idx, reason)
            quarantined.append(QuarantinedRow(index=idx, reason=reason, raw=raw_row))
            continue

        if not row.l1 or not row.l2:
            # tolerated: scores via keywords only
            logger.debug("DSS grid row %d has blank L1/L2", idx)

        rows.append(row)

    return rows, quarantined


def _normalize_row(raw_row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flat grid shape -> PolicyRow kwargs.
    Column cells may sit at top level (letter, enum name or header)
    or under an explicit "actions" mapping.
    """
    out: Dict[str, Any] = {"actions": {}}
    actions: Dict[ColumnKey, str] = out["actions"]

    explicit = raw_row.get("actions")
    if explicit is not None:
        if not isinstance(explicit, dict):
            raise ValueError("actions must be a mapping")
        for k, v in explicit.items():
            col = ColumnKey.parse(k)
            if col is None:
                raise ValueError(f"unknown column: {k}")
            actions[col] = _cell(v, col)

    for k, v in raw_row.items():
        key = str(k).strip()
        low = key.lower()
        if low in _ROW_FIELDS:
            if low != "actions":
                out[low] = v
            continue
        col = ColumnKey.parse(key)
        if col is None:
            # extra authoring columns (notes, owner ...)
            continue
        actions[col] = _cell(v, col)

    return out


def _cell(v: Any, col: ColumnKey) -> str:
    if v is None:
        return ""
    if not isinstance(v, str):
        raise ValueError(f"column {col.value} must be text")
    return v.strip()


def _first_error(e: Exception) -> str:
    if isinstance(e, ValidationError):
        errs = e.errors()
        if errs:
            loc = ".".join(str(x) for x in errs[0].get("loc", ()))
            return f"{loc}: {errs[0].get('msg')}" if loc else str(errs[0].get("msg"))
    return str(e)
