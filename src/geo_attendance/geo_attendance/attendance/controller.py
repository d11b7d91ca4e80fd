from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role
from ..core.exceptions import AlreadyMarkedError, DomainError, FaceMismatchError
from ..container import Container
from .model import DeviceInfo
from .presenters import record_to_dict, working_time_to_dict

logger = logging.getLogger(__name__)

API_PREFIX = "/api/attendance"


def _error_response(exc: DomainError, *, extra: Optional[dict[str, Any]] = None):
    body: dict[str, Any] = {"success": False, "message": exc.message}
    body.update(exc.payload())
    if isinstance(exc, AlreadyMarkedError) and exc.existing is not None:
        body["data"] = record_to_dict(exc.existing)
    if extra:
        body.update(extra)
    return jsonify(body), exc.status_code


def _server_error(message: str):
    return jsonify({"success": False, "message": message}), 500


def _face_flow_validation(exc: DomainError) -> dict[str, bool]:
    """Which of the two checks had passed when the combined flow stopped."""
    if isinstance(exc, AlreadyMarkedError):
        return {"face": True, "location": True}
    if isinstance(exc, FaceMismatchError):
        return {"face": False, "location": True}
    return {"face": False, "location": False}


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or ""


def _json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401

            if session.get("role") != Role.ADMIN.value:
                return jsonify({"success": False, "message": "Access denied. Admin only."}), 403

            return view(*args, **kwargs)

        return wrapper

    def _device_info(data: dict[str, Any]) -> DeviceInfo:
        return DeviceInfo.from_payload(
            data.get("deviceInfo"), default_user_agent=request.headers.get("User-Agent", "")
        )

    @app.route(f"{API_PREFIX}/checkin", methods=["POST"], endpoint="attendance_checkin")
    @login_required
    def checkin():
        data = _json_body()
        try:
            record = service.check_in(
                int(session["user_id"]),
                location=data.get("location"),
                device_info=_device_info(data),
                notes=str(data.get("notes") or ""),
                ip_address=_client_ip(),
            )
        except DomainError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Check-in failed")
            return _server_error("Server error while marking attendance")

        return jsonify({
            "success": True,
            "message": "Attendance marked successfully",
            "data": record_to_dict(record),
        }), 201

    @app.route(f"{API_PREFIX}/checkin-with-face", methods=["POST"], endpoint="attendance_checkin_with_face")
    @login_required
    def checkin_with_face():
        data = _json_body()
        try:
            result = service.check_in_with_face(
                int(session["user_id"]),
                location=data.get("location"),
                face_descriptor=data.get("faceDescriptor"),
                device_info=_device_info(data),
                notes=str(data.get("notes") or ""),
                ip_address=_client_ip(),
            )
        except DomainError as e:
            return _error_response(e, extra={"validation": _face_flow_validation(e), "errors": [e.message]})
        except Exception:
            logger.exception("Face check-in failed")
            return _server_error("Server error while marking attendance")

        return jsonify({
            "success": True,
            "message": "Attendance marked successfully with dual validation",
            "data": record_to_dict(result.record),
            "validation": {"face": True, "location": True},
            "details": {
                "faceSimilarity": f"{result.face.similarity:.4f}",
                "locationDistance": round(result.geofence.distance),
                "officeRadius": result.geofence.radius,
            },
        }), 201

    @app.route(f"{API_PREFIX}/checkout", methods=["PUT"], endpoint="attendance_checkout")
    @login_required
    def checkout():
        data = _json_body()
        try:
            record = service.check_out(
                int(session["user_id"]),
                location=data.get("location"),
                notes=str(data.get("notes") or ""),
            )
        except DomainError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Check-out failed")
            return _server_error("Server error while marking checkout")

        return jsonify({
            "success": True,
            "message": "Checkout marked successfully",
            "data": record_to_dict(record),
            "workingTime": working_time_to_dict(record.working_time),
        }), 200

    @app.route(f"{API_PREFIX}/verify-face", methods=["POST"], endpoint="attendance_verify_face")
    @login_required
    def verify_face():
        data = _json_body()
        try:
            result = service.verify_face(int(session["user_id"]), data.get("faceDescriptor"))
        except DomainError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Face verification failed")
            return _server_error("Server error while verifying face")

        return jsonify({"success": True, "match": result.match, "similarity": f"{result.similarity:.4f}"}), 200

    @app.route(f"{API_PREFIX}/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        try:
            view = service.get_today(int(session["user_id"]))
        except DomainError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Loading today's attendance failed")
            return _server_error("Server error while fetching today's attendance")

        return jsonify({
            "success": True,
            "data": record_to_dict(view.record),
            "hasCheckedIn": view.has_checked_in,
            "hasCheckedOut": view.has_checked_out,
            "workingTime": working_time_to_dict(view.working_time),
        }), 200

    @app.route(f"{API_PREFIX}/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def history():
        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
            page = int(request.args.get("page", 1))
        except ValueError:
            return jsonify({"success": False, "message": "page and limit must be integers"}), 400

        start_raw = request.args.get("startDate")
        end_raw = request.args.get("endDate")
        try:
            start_date = parse_iso_date(start_raw) if start_raw else None
            end_date = parse_iso_date(end_raw) if end_raw else None
        except ValueError:
            return jsonify({"success": False, "message": "startDate and endDate must be YYYY-MM-DD"}), 400

        try:
            result = service.get_history(
                int(session["user_id"]), start_date=start_date, end_date=end_date, page=page, limit=limit
            )
        except DomainError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Loading attendance history failed")
            return _server_error("Server error while fetching attendance history")

        return jsonify({
            "success": True,
            "data": [record_to_dict(r) for r in result.records],
            "pagination": {"current": result.page, "pages": result.pages, "total": result.total},
        }), 200

    @app.route(f"{API_PREFIX}/<int:attendance_id>", methods=["PUT"], endpoint="attendance_admin_update")
    @admin_required
    def admin_update(attendance_id: int):
        data = _json_body()
        try:
            record = service.admin_update(
                actor_role=str(session.get("role")),
                actor_user_id=int(session["user_id"]),
                attendance_id=attendance_id,
                status=data.get("status"),
                notes=data.get("notes"),
                is_manual_entry=data.get("isManualEntry"),
                manual_entry_reason=data.get("manualEntryReason"),
            )
        except DomainError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Updating attendance %s failed", attendance_id)
            return _server_error("Server error while updating attendance")

        return jsonify({
            "success": True,
            "message": "Attendance record updated successfully",
            "data": record_to_dict(record),
        }), 200

    @app.route(f"{API_PREFIX}/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_admin_delete")
    @admin_required
    def admin_delete(attendance_id: int):
        try:
            service.admin_delete(actor_role=str(session.get("role")), attendance_id=attendance_id)
        except DomainError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Deleting attendance %s failed", attendance_id)
            return _server_error("Server error while deleting attendance")

        return jsonify({"success": True, "message": "Attendance record deleted successfully"}), 200
