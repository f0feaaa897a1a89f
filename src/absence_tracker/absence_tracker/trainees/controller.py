from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.web import current_role, json_body
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/trainees", methods=["GET"], endpoint="list_trainees")
    def list_trainees():
        data = container.trainee_service.list_trainees(groupe=request.args.get("group"))
        return jsonify({"success": True, "data": data})

    @app.route("/api/trainees/with-stats", methods=["GET"], endpoint="trainees_with_stats")
    def trainees_with_stats():
        return jsonify(container.trainee_service.list_with_stats(groupe=request.args.get("group")))

    @app.route("/api/trainees/export.xlsx", methods=["GET"], endpoint="export_trainees")
    def export_trainees():
        content = container.report_service.export_trainee_stats_xlsx(groupe=request.args.get("group"))
        return send_file(
            io.BytesIO(content),
            download_name="stagiaires_absences.xlsx",
            as_attachment=True,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    @app.route("/api/trainees/<cef>/absences", methods=["GET"], endpoint="trainee_absences")
    def trainee_absences(cef: str):
        return jsonify(container.trainee_service.get_absences(cef))

    @app.route("/api/trainees/<cef>/statistics", methods=["GET"], endpoint="trainee_statistics")
    def trainee_statistics(cef: str):
        return jsonify(container.trainee_service.get_statistics(cef).to_dict())

    @app.route("/api/trainees", methods=["POST"], endpoint="create_trainee")
    def create_trainee():
        body = json_body()
        trainee = container.trainee_service.create_trainee(
            current_role=current_role(),
            cef=body.get("cef", ""),
            name=body.get("name", ""),
            first_name=body.get("first_name", ""),
            groupe=body.get("groupe", ""),
            phone=body.get("phone"),
        )
        app.logger.info("trainee %s created in %s", trainee.cef, trainee.groupe)
        return jsonify({"success": True, "data": trainee.to_dict()}), 201

    @app.route("/api/trainees/<cef>", methods=["GET"], endpoint="get_trainee")
    def get_trainee(cef: str):
        return jsonify({"success": True, "data": container.trainee_service.get_trainee(cef)})

    @app.route("/api/trainees/<cef>", methods=["PUT"], endpoint="update_trainee")
    def update_trainee(cef: str):
        body = json_body()
        trainee = container.trainee_service.update_trainee(
            current_role=current_role(),
            cef=cef,
            new_cef=body.get("cef"),
            name=body.get("name"),
            first_name=body.get("first_name"),
            groupe=body.get("groupe"),
            phone=body.get("phone"),
        )
        return jsonify(trainee.to_dict())

    @app.route("/api/trainees/<cef>", methods=["DELETE"], endpoint="delete_trainee")
    def delete_trainee(cef: str):
        container.trainee_service.delete_trainee(current_role=current_role(), cef=cef)
        return "", 204

    @app.route("/api/trainees/bulk-import", methods=["POST"], endpoint="bulk_import_trainees")
    def bulk_import_trainees():
        rows = json_body().get("trainees")
        if not isinstance(rows, list):
            raise ValidationError("Trainees array is required")
        result = container.trainee_service.bulk_import(current_role=current_role(), rows=rows)
        return jsonify({"success": True, **result})

    @app.route("/api/trainees/import", methods=["POST"], endpoint="import_trainees")
    def import_trainees():
        role = current_role()
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("No file uploaded")
        if not upload.filename.lower().endswith(".xlsx"):
            raise ValidationError("Unsupported file type")

        result = container.trainee_service.import_trainees_xlsx(current_role=role, content=upload.read())
        app.logger.info("trainee file %s imported: %s rows", upload.filename, result["imported"])
        return jsonify(
            {
                "success": True,
                **result,
                "message": f"{result['imported']} stagiaires importés",
            }
        )
