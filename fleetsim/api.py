from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Flask, Response, jsonify, request

from fleetsim.exporters import nodes_to_csv, validation_report_markdown
from fleetsim.fleet_state import FleetState
from fleetsim.query import (
	SortDir,
	SortKey,
	filter_nodes,
	parse_failure_class,
	parse_status,
	sort_nodes,
)
from fleetsim.stats import fleet_kpis

logger = logging.getLogger(__name__)


def create_app(state: FleetState) -> Flask:
	app = Flask(__name__)
	# Store state in app config so it's accessible in all endpoints
	app.config['fleet_state'] = state

	@app.errorhandler(ValueError)
	def bad_request(e: ValueError) -> Any:
		logger.warning(f"Rejected {request.method} {request.path}: {e}")
		return jsonify({"error": str(e)}), 400

	@app.get("/health")
	def health() -> Any:
		state = app.config['fleet_state']
		return jsonify({"status": "ok", "snapshot_age_ms": state.age_ms()})

	@app.get("/snapshot")
	def snapshot() -> Any:
		state = app.config['fleet_state']
		snap = state.ensure_snapshot()

		status = parse_status(request.args.get("status"))
		failure = parse_failure_class(request.args.get("failure"))
		key = SortKey.parse(request.args.get("sort"))
		direction = SortDir.parse(request.args.get("dir"))
		raw_limit = request.args.get("limit")
		try:
			limit = None if raw_limit is None else int(raw_limit)
		except ValueError:
			raise ValueError(f"limit must be an integer, got {raw_limit!r}") from None
		if limit is not None and limit < 0:
			raise ValueError(f"limit must be non-negative, got {limit}")

		rows = filter_nodes(snap.nodes, status=status, failure_class=failure, query=request.args.get("q", ""))
		rows = sort_nodes(rows, key, direction)
		matched = len(rows)
		if limit is not None:
			rows = rows[:limit]

		return jsonify({
			"generated_at": snap.generated_at,
			"total": len(snap.nodes),
			"matched": matched,
			"nodes": [n.to_dict() for n in rows],
			"events": [e.to_dict() for e in snap.events],
			"kpis": fleet_kpis(snap).to_dict(),
		})

	@app.post("/snapshot/regenerate")
	def regenerate() -> Any:
		state = app.config['fleet_state']
		body: Dict[str, Any] = request.get_json(silent=True) or {}
		size = body.get("size")
		if size is not None:
			if isinstance(size, bool) or not isinstance(size, int):
				return jsonify({"error": "size must be an integer"}), 400
		snap = state.regenerate(size)
		return jsonify({
			"generated_at": snap.generated_at,
			"total": len(snap.nodes),
			"events": [e.to_dict() for e in snap.events],
		})

	@app.post("/snapshot/tick")
	def tick() -> Any:
		state = app.config['fleet_state']
		snap, fresh = state.tick()
		return jsonify({
			"generated_at": snap.generated_at,
			"total": len(snap.nodes),
			"new_events": [e.to_dict() for e in fresh],
			"events": [e.to_dict() for e in snap.events],
			"kpis": fleet_kpis(snap).to_dict(),
		})

	@app.get("/events")
	def events() -> Any:
		state = app.config['fleet_state']
		snap = state.ensure_snapshot()
		return jsonify({"events": [e.to_dict() for e in snap.events]})

	@app.post("/validate")
	def validate() -> Any:
		state = app.config['fleet_state']
		run = state.validate()
		return jsonify(run.to_dict())

	@app.get("/validation/latest")
	def latest_validation() -> Any:
		state = app.config['fleet_state']
		run = state.last_run
		if run is None:
			return jsonify({"error": "no validation run yet"}), 404
		return jsonify(run.to_dict())

	@app.get("/export/nodes.csv")
	def export_nodes() -> Any:
		state = app.config['fleet_state']
		snap = state.ensure_snapshot()
		return Response(
			nodes_to_csv(snap.nodes),
			mimetype="text/csv",
			headers={"Content-Disposition": f"attachment; filename=fleet-{snap.generated_at}.csv"},
		)

	@app.get("/export/report.md")
	def export_report() -> Any:
		state = app.config['fleet_state']
		run = state.last_run
		if run is None:
			return jsonify({"error": "no validation run yet"}), 404
		return Response(
			validation_report_markdown(run, state.snapshot),
			mimetype="text/markdown",
			headers={"Content-Disposition": f"attachment; filename={run.run_id}.md"},
		)

	return app
