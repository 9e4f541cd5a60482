"""Run logs for simulation and cross-validation reports.

Creates machine-readable JSON logs containing the configuration, the
aggregate statistics and every per-trial record, plus a human-readable
rendering of the same content.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from .results import CrossValidationResults, SimulationResults


def _safe_float(val: Any) -> Any:
    """Convert numpy types to Python native types for JSON serialization."""
    if isinstance(val, np.integer):
        return int(val)
    if isinstance(val, np.floating):
        return float(val)
    if isinstance(val, np.ndarray):
        return val.tolist()
    if val is not None and not isinstance(val, (list, dict, str)) and pd.isna(val):
        return None
    return val


def _records(df: pd.DataFrame) -> list:
    return [
        {col: _safe_float(row[col]) for col in df.columns}
        for _, row in df.iterrows()
    ]


def create_full_report(
    config: dict,
    results: Union[SimulationResults, CrossValidationResults],
    timing: Optional[dict] = None,
) -> str:
    """Generate comprehensive log file for a run.

    Args:
        config: Run configuration dict
        results: SimulationResults or CrossValidationResults
        timing: Timing information dict

    Returns:
        JSON string containing the full report
    """
    is_cv = isinstance(results, CrossValidationResults)
    report = {
        "meta": {
            "generated": datetime.now().isoformat(),
            "version": "1.0",
            "kind": "cross_validation" if is_cv else "simulation",
        },
        "config": {k: _safe_float(v) for k, v in config.items()},
        "run": {k: _safe_float(v) for k, v in results.config.items()},
        "aggregate": {k: _safe_float(v) for k, v in results.report.to_dict().items()},
        "raw_data": _records(results.to_frame()),
        "timing": timing or {},
    }
    if is_cv:
        report["whole_data"] = {k: _safe_float(v) for k, v in results.whole.to_dict().items()}
        report["method"] = results.method
        report["formula"] = results.formula

    return json.dumps(report, indent=2, default=str)


def save_report(report: str, output_dir: str = "logs", prefix: str = "run") -> str:
    """Save report to timestamped log file.

    Args:
        report: JSON string report
        output_dir: Directory to save report
        prefix: File name prefix

    Returns:
        Path to saved report file
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = f"{output_dir}/{prefix}_{timestamp}.log"
    with open(path, "w") as f:
        f.write(report)
    return path


def format_human_readable(report_json: str) -> str:
    """Format report as human-readable text with JSON sections."""
    report = json.loads(report_json)

    lines = []
    lines.append("=" * 80)
    lines.append(f"{report['meta']['kind'].replace('_', ' ').upper()} REPORT")
    lines.append(f"Generated: {report['meta']['generated']}")
    lines.append("=" * 80)
    lines.append("")

    lines.append("## CONFIGURATION")
    lines.append(json.dumps(report["config"], indent=2))
    lines.append("")

    lines.append("## RUN")
    lines.append(json.dumps(report["run"], indent=2))
    lines.append("")

    if "whole_data" in report:
        lines.append(f"## WHOLE-DATA FIT ({report['formula']})")
        lines.append(json.dumps(report["whole_data"], indent=2))
        lines.append("")

    lines.append("## AGGREGATE")
    lines.append(json.dumps(report["aggregate"], indent=2))
    lines.append("")

    if report.get("timing"):
        lines.append("## TIMING")
        lines.append(json.dumps(report["timing"], indent=2))
        lines.append("")

    lines.append(f"## RAW DATA: {len(report['raw_data'])} records")
    lines.append("")

    lines.append("=" * 80)
    lines.append("END REPORT")
    lines.append("=" * 80)

    return "\n".join(lines)
