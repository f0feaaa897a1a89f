from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_role, json_body
from ..container import Container


def _optional_date(name: str):
    value = request.args.get(name)
    return parse_iso_date(value) if value else None


def register(app: Flask, container: Container) -> None:
    svc = container.group_service

    @app.route("/api/groups", methods=["GET"], endpoint="list_groups")
    def list_groups():
        return jsonify([g.to_dict() for g in svc.list_groups()])

    @app.route("/api/groups", methods=["POST"], endpoint="create_group")
    def create_group():
        body = json_body()
        group = svc.create_group(
            current_role=current_role(),
            name=body.get("name", ""),
            filiere=body.get("filiere"),
            annee=body.get("annee"),
        )
        app.logger.info("group %s created", group.name)
        return jsonify(group.to_dict()), 201

    @app.route("/api/groups/<int:group_id>", methods=["GET"], endpoint="get_group")
    def get_group(group_id: int):
        return jsonify(svc.get_group(group_id).to_dict())

    @app.route("/api/groups/<int:group_id>", methods=["PUT"], endpoint="update_group")
    def update_group(group_id: int):
        body = json_body()
        group = svc.update_group(
            current_role=current_role(),
            group_id=group_id,
            name=body.get("name"),
            filiere=body.get("filiere"),
            annee=body.get("annee"),
        )
        return jsonify(group.to_dict())

    @app.route("/api/groups/<int:group_id>", methods=["DELETE"], endpoint="delete_group")
    def delete_group(group_id: int):
        svc.delete_group(current_role=current_role(), group_id=group_id)
        return "", 204

    @app.route("/api/groups/<group>/trainees", methods=["GET"], endpoint="group_trainees")
    def group_trainees(group: str):
        return jsonify([t.to_dict() for t in svc.group_trainees(group)])

    @app.route("/api/groups/<group>/absences", methods=["GET"], endpoint="group_absences")
    def group_absences(group: str):
        data = svc.group_absences(
            group,
            on=_optional_date("date"),
            start=_optional_date("start_date"),
            end=_optional_date("end_date"),
        )
        return jsonify(data)
