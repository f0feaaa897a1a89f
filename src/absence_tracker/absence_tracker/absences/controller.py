from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.validators import coerce_flag, coerce_ids
from ..common.web import current_role, current_user_id, json_body
from ..container import Container
from .service import UNCHANGED


def register(app: Flask, container: Container) -> None:
    svc = container.absence_service

    @app.route("/api/absences", methods=["POST"], endpoint="record_roll_call")
    def record_roll_call():
        body = json_body()
        data = svc.record_session(
            current_role=current_role(),
            groupe=body.get("group") or body.get("groupe", ""),
            session_date=parse_iso_date(body.get("date", "")),
            start_time=body.get("start_time", ""),
            end_time=body.get("end_time", ""),
            students=body.get("students") or [],
            teacher_id=body.get("teacher_id") or current_user_id(),
        )
        return jsonify(data), 201

    @app.route("/api/absences/<int:session_id>", methods=["GET"], endpoint="get_roll_call")
    def get_roll_call(session_id: int):
        return jsonify(svc.session_detail(session_id))

    @app.route("/api/absences/<int:session_id>", methods=["PUT"], endpoint="update_roll_call")
    def update_roll_call(session_id: int):
        body = json_body()
        data = svc.update_session(
            current_role=current_role(),
            session_id=session_id,
            groupe=body.get("group") or body.get("groupe"),
            session_date=parse_iso_date(body["date"]) if body.get("date") else None,
            start_time=body.get("start_time"),
            end_time=body.get("end_time"),
            teacher_id=body["teacher_id"] if "teacher_id" in body else UNCHANGED,
            is_validated=coerce_flag(body["is_validated"]) if "is_validated" in body else None,
            students=body.get("students"),
        )
        return jsonify(data)

    @app.route("/api/absences/<int:session_id>", methods=["DELETE"], endpoint="delete_roll_call")
    def delete_roll_call(session_id: int):
        svc.delete_session(current_role=current_role(), session_id=session_id)
        return "", 204

    @app.route("/api/absences/validate", methods=["POST"], endpoint="validate_absences")
    def validate_absences():
        body = json_body()
        result = svc.validate_absences(
            current_role=current_role(),
            absence_ids=coerce_ids(body.get("trainee_absence_ids"), body.get("trainee_absence_id")),
            is_validated=coerce_flag(body.get("is_validated", True)),
            comment=body.get("validation_comment"),
            validated_by=current_user_id(),
        )
        return jsonify({"success": True, **result})

    @app.route("/api/absences/validate-displayed", methods=["POST"], endpoint="validate_displayed_absences")
    def validate_displayed_absences():
        body = json_body()
        data = svc.validate_displayed(
            current_role=current_role(),
            groupe=body.get("group", ""),
            session_date=parse_iso_date(body.get("date", "")),
            absence_ids=coerce_ids(body.get("absenceIds")),
            validated_by=current_user_id(),
        )
        return jsonify(
            {
                "success": True,
                "message": f"{data['validatedCount']} absences validées avec succès",
                "data": data,
            }
        )

    @app.route("/api/absences/justify", methods=["POST"], endpoint="justify_absences")
    def justify_absences():
        body = json_body()
        result = svc.justify_absences(
            current_role=current_role(),
            absence_ids=coerce_ids(body.get("trainee_absence_ids"), body.get("trainee_absence_id")),
            justified=body.get("is_justified") in ("justified", True),
            comment=body.get("justification_comment"),
            has_billet_entree=coerce_flag(body.get("has_billet_entree", False)),
        )
        return jsonify({"success": True, **result})

    @app.route("/api/absences/<int:absence_id>/billet-entree", methods=["PATCH"], endpoint="mark_billet_entree")
    def mark_billet_entree(absence_id: int):
        absence = svc.mark_billet_entree(current_role=current_role(), absence_id=absence_id)
        return jsonify(absence.to_dict())

    @app.route("/api/trainee-absences/<int:absence_id>", methods=["PATCH"], endpoint="update_trainee_absence")
    def update_trainee_absence(absence_id: int):
        body = json_body()
        absence = svc.update_status(current_role=current_role(), absence_id=absence_id, status=body.get("status", ""))
        return jsonify(
            {
                "success": True,
                "message": "Trainee absence status updated successfully",
                "trainee_absence": absence.to_dict(),
            }
        )

    @app.route(
        "/api/trainee-absences/<int:absence_id>/update-column",
        methods=["PATCH"],
        endpoint="update_trainee_absence_column",
    )
    def update_trainee_absence_column(absence_id: int):
        body = json_body()
        absence = svc.update_column(
            current_role=current_role(),
            absence_id=absence_id,
            column=str(body.get("column", "")),
            value=body.get("value"),
        )
        return jsonify(
            {
                "success": True,
                "message": "Trainee absence updated successfully",
                "trainee_absence": absence.to_dict(),
            }
        )
