"""CSV export of fleet nodes and Markdown rendering of validation runs."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import fields
from datetime import datetime, timezone
from typing import Optional, Sequence

from fleetsim.state import Node, Snapshot, ValidationRun
from fleetsim.stats import fleet_kpis

logger = logging.getLogger(__name__)

NODE_COLUMNS = [f.name for f in fields(Node)]


def nodes_to_csv(nodes: Sequence[Node]) -> str:
	"""
	Serialize nodes field by field, in declaration order.

	Values are quoted only when they contain a comma, quote or newline.
	Returns an empty string for no rows.
	"""
	if not nodes:
		return ""

	buf = io.StringIO()
	writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
	writer.writerow(NODE_COLUMNS)
	for node in nodes:
		row = node.to_dict()
		writer.writerow([row[col] for col in NODE_COLUMNS])

	logger.debug(f"Exported {len(nodes)} nodes to CSV")
	return buf.getvalue().rstrip("\n")


def _fmt_ts(ts_ms: int) -> str:
	return datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _md_cell(text: str) -> str:
	return text.replace("|", "\\|").replace("\n", " ")


def validation_report_markdown(run: ValidationRun, snapshot: Optional[Snapshot] = None) -> str:
	overall = "PASS" if run.summary.overall_pass else "FAIL"
	lines = [
		"# Fleet Validation Report",
		"",
		f"- Run ID: `{run.run_id}`",
		f"- Started: {_fmt_ts(run.started_at)}",
		f"- Finished: {_fmt_ts(run.finished_at)}",
		f"- Overall: **{overall}**",
		f"- Passed: {run.summary.pass_count}",
		f"- Failed: {run.summary.fail_count}",
		"",
		"## Checks",
		"",
		"| Check | Result | Detail |",
		"|---|---|---|",
	]
	for check in run.checks:
		result = "PASS" if check.passed else "FAIL"
		lines.append(f"| {_md_cell(check.name)} | {result} | {_md_cell(check.detail)} |")

	if snapshot is not None:
		kpis = fleet_kpis(snapshot)
		lines += [
			"",
			"## Fleet",
			"",
			f"- Snapshot: {_fmt_ts(snapshot.generated_at)}",
			f"- Nodes: {kpis.total}",
			f"- Healthy / Degraded / Critical: {kpis.healthy} / {kpis.degraded} / {kpis.critical}",
			f"- Avg CPU temp: {kpis.avg_temp_c:.1f}°C (p95 {kpis.p95_temp_c:.1f}°C)",
			f"- p95 power: {kpis.p95_power_w:.0f}W",
			f"- Avg health score: {kpis.avg_health_score:.1f}",
		]

	return "\n".join(lines) + "\n"
