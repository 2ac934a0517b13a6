# --- pdfxml_web/api/conversions.py ---
import logging
import os

from flask import Blueprint, Response, current_app, jsonify, request

from pdfxml_lib.api import convert
from pdfxml_lib.errors import ConversionError
from pdfxml_lib.serializer import xml_file_name

bp = Blueprint("conversions", __name__)
log = logging.getLogger("pdfxml_web.api")

PDF_MIME_TYPE = "application/pdf"


def _is_pdf_upload(upload) -> bool:
    """Accepts uploads declared as PDF or named *.pdf."""
    _, ext = os.path.splitext(upload.filename or "")
    return upload.mimetype == PDF_MIME_TYPE or ext.lower() == ".pdf"


def _summary(row) -> dict:
    """A record without its XML body, for list views."""
    return {
        "id": row["id"],
        "user_id": row["user_id"],
        "file_name": row["file_name"],
        "page_count": row["page_count"],
        "created_at": row["created_at"],
    }


@bp.route("/", methods=["POST"])
def create_conversion():
    """Converts an uploaded PDF and stores the result for the given user."""
    user_id = request.form.get("user_id", "").strip()
    if not user_id:
        return jsonify({"error": "Missing 'user_id' in form data"}), 400
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return jsonify({"error": "No file uploaded"}), 400
    if not _is_pdf_upload(upload):
        return jsonify({"error": "Please select a PDF file"}), 400

    data = upload.read()
    options = current_app.config_service.get_conversion_options()
    if len(data) > options["max_upload_mb"] * 1024 * 1024:
        return jsonify({"error": f"File exceeds {options['max_upload_mb']} MB"}), 413

    # Nothing is persisted unless the whole conversion succeeds.
    result = convert(
        data,
        upload.filename,
        len(data),
        xsd_schema=request.form.get("schema") or None,
        skip_bad_pages=options["skip_bad_pages"],
    )
    conversion_id = current_app.storage.persist(
        {
            "user_id": user_id,
            "file_name": upload.filename,
            "xml_content": result.xml,
            "page_count": result.page_count,
        }
    )
    log.info("Stored conversion %d of '%s'.", conversion_id, upload.filename)
    return jsonify(_summary(current_app.storage.get(conversion_id))), 201


@bp.route("/", methods=["GET"])
def list_conversions():
    """Lists a user's conversions, newest first."""
    user_id = request.args.get("user_id", "").strip()
    if not user_id:
        return jsonify({"error": "Missing 'user_id' query parameter"}), 400
    rows = current_app.storage.list(user_id, include_xml=False)
    return jsonify([_summary(r) for r in rows])


@bp.route("/<int:conversion_id>", methods=["GET"])
def get_conversion(conversion_id):
    """Gets a single conversion including its XML."""
    row = current_app.storage.get(conversion_id)
    if row is None:
        return jsonify({"error": "Conversion not found"}), 404
    return jsonify(dict(row))


@bp.route("/<int:conversion_id>/download", methods=["GET"])
def download_conversion(conversion_id):
    """Returns the stored XML as a file attachment."""
    row = current_app.storage.get(conversion_id)
    if row is None:
        return jsonify({"error": "Conversion not found"}), 404
    return Response(
        row["xml_content"],
        mimetype="application/xml",
        headers={
            "Content-Disposition": f'attachment; filename="{xml_file_name(row["file_name"])}"'
        },
    )


@bp.route("/<int:conversion_id>", methods=["DELETE"])
def delete_conversion(conversion_id):
    """Deletes a conversion."""
    if not current_app.storage.delete(conversion_id):
        return jsonify({"error": "Conversion not found"}), 404
    return "", 204


@bp.errorhandler(ConversionError)
def handle_conversion_error(e):
    log.warning("Conversion rejected: %s", e.message)
    return jsonify({"error": e.message}), 422
