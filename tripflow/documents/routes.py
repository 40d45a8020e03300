"""Report document routes."""
from __future__ import annotations

from typing import Any

from flask_login import login_required

from tripflow.services import documents
from tripflow.utils.helpers import current_principal, json_response, request_payload, result_response

from . import documents_bp

TRANSITIONS = {
    "submit": documents.submit_document,
    "approve": documents.approve_document,
    "reject": documents.reject_document,
}


@documents_bp.route("", methods=["GET"])
@login_required
def list_documents() -> Any:
    return result_response(documents.list_documents(current_principal()), key="documents")


@documents_bp.route("", methods=["POST"])
@login_required
def create_document() -> Any:
    result = documents.create_document(current_principal(), request_payload())
    return result_response(result, key="document", status=201)


@documents_bp.route("/<int:document_id>", methods=["PATCH"])
@login_required
def update_document(document_id: int) -> Any:
    result = documents.update_document(current_principal(), document_id, request_payload())
    return result_response(result, key="document")


@documents_bp.route("/<int:document_id>", methods=["DELETE"])
@login_required
def delete_document(document_id: int) -> Any:
    return result_response(documents.delete_document(current_principal(), document_id))


@documents_bp.route("/<int:document_id>/<action>", methods=["POST"])
@login_required
def transition(document_id: int, action: str) -> Any:
    handler = TRANSITIONS.get(action)
    if handler is None:
        return json_response({"error": f"Unknown action '{action}'."}, status=404)
    return result_response(handler(current_principal(), document_id), key="document")


@documents_bp.route("/<int:document_id>/attachments", methods=["POST"])
@login_required
def add_attachment(document_id: int) -> Any:
    result = documents.add_attachment(current_principal(), document_id, request_payload().get("url"))
    return result_response(result, key="document")


@documents_bp.route("/<int:document_id>/attachments", methods=["DELETE"])
@login_required
def remove_attachment(document_id: int) -> Any:
    result = documents.remove_attachment(current_principal(), document_id, request_payload().get("url"))
    return result_response(result, key="document")
