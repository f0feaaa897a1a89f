from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import json_body, query_date
from ..container import Container
from ..scoring.calculator.factory import calculator_for
from ..scoring.engine import aggregate


def register(app: Flask, container: Container) -> None:
    @app.route("/api/groups/<group>/weekly-report", methods=["GET"], endpoint="weekly_report")
    def weekly_report(group: str):
        report = container.report_service.weekly_report(
            groupe=group,
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        return jsonify(report)

    @app.route("/api/scoring/aggregate", methods=["POST"], endpoint="scoring_aggregate")
    def scoring_aggregate():
        body = json_body()
        calculator = calculator_for(body.get("formula") or "standard")
        events = body.get("events") or []
        if not isinstance(events, list):
            events = []
        # Non-object items are ignored; the engine coerces everything else.
        result = aggregate([e for e in events if isinstance(e, dict)], calculator=calculator)
        return jsonify(result.to_dict())
