from __future__ import annotations

from flask import Flask, jsonify, request

from ..core.enums import PunchState
from ..core.exceptions import BackendUnavailable, ValidationError
from ..punches.model import PunchEvent
from ..punches.normalizer import TimeNormalizer
from ..container import Container


def _parse_punch(payload, normalizer: TimeNormalizer) -> PunchEvent:
    if not isinstance(payload, dict):
        raise ValidationError("Each punch must be a JSON object")

    subject_id = payload.get("subject_id", payload.get("user_id"))
    if subject_id is None or str(subject_id).strip() == "":
        raise ValidationError("subject_id is required")

    timestamp = payload.get("timestamp")
    if not timestamp:
        raise ValidationError("timestamp is required")

    return PunchEvent(
        subject_id=str(subject_id).strip(),
        instant=normalizer.to_instant(timestamp),
        raw_state=PunchState.from_device(payload.get("state")),
    )


def _outcome_json(outcome) -> dict:
    return {
        "subject_id": outcome.subject_id,
        "instant": outcome.instant.isoformat(),
        "status": outcome.status.value,
        "employee_id": outcome.employee_id,
        "session_id": outcome.session_id,
        "error": outcome.error,
    }


def register(app: Flask, container: Container) -> None:
    service = container.sync_service

    @app.route("/punches", methods=["POST"], endpoint="push_punches")
    def push_punches():
        """Push one punch or a list of punches from a terminal or a relay."""
        payload = request.get_json(silent=True)
        if payload is None:
            return jsonify({"success": False, "message": "Body must be JSON"}), 400

        try:
            if isinstance(payload, list):
                events = [_parse_punch(p, container.normalizer) for p in payload]
                report = service.handle_batch(events, source="push")
                outcomes = report.outcomes
            else:
                outcomes = [service.handle_punch(_parse_punch(payload, container.normalizer), source="push")]
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except BackendUnavailable as e:
            return jsonify({"success": False, "message": str(e)}), 503

        retry = [o for o in outcomes if o.retryable]
        body = {"success": not retry, "outcomes": [_outcome_json(o) for o in outcomes]}
        if retry:
            body["message"] = "Backend unavailable, resend later"
            return jsonify(body), 503
        return jsonify(body), 200

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"success": True, **service.status()}), 200
