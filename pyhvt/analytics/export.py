import json
from pathlib import Path
from typing import Any, Mapping, Sequence

import pandas as pd

from pyhvt.core.models import OutcomeRecord

from .outcomes import OUTCOME_COLUMNS


def export_outcomes_csv(path: str | Path, records: Sequence[OutcomeRecord]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    frame = pd.DataFrame(
        [[r.timestamp.isoformat(), r.symbol, r.outcome.value, str(r.close), str(r.pnl)] for r in records],
        columns=OUTCOME_COLUMNS,
    )
    frame.to_csv(p, index=False)


def export_metrics_json(path: str | Path, metrics: Mapping[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(dict(metrics), f, indent=2, sort_keys=True, default=str)
