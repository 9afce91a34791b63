"""
JSON views for the member dashboard configurator.

Sessions are kept in the cache between requests (see session_store) and are
scoped to the logged-in user. Rejected mutations are not errors: they return
200 with the tagged result so the UI can explain why nothing changed.
"""

import json
import logging
from functools import wraps

from asgiref.sync import async_to_sync
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from walletpass.member_dashboard import session_store
from walletpass.member_dashboard.catalog import ProgramType, get_sections_for_program_type
from walletpass.member_dashboard.exceptions import ProgramTypeNotAllowed, PublishError
from walletpass.member_dashboard.publishing import HttpPublisher
from walletpass.member_dashboard.schemas import get_section_schema
from walletpass.member_dashboard.session import ConfiguratorSession
from walletpass.member_dashboard.types import MutationResult, TemplateDescriptor

logger = logging.getLogger(__name__)


def get_publisher():
    return HttpPublisher()


def _user_session_id(request, session_id: str) -> str:
    return f"{request.user.pk}:{session_id}"


def _capabilities_from_query(request) -> frozenset[str]:
    """Accept both ?capabilities=a,b and ?capabilities=a&capabilities=b."""
    values = request.GET.getlist("capabilities")
    return frozenset(c.strip() for value in values for c in value.split(",") if c.strip())


def _is_string_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _session_response(session_id: str, session: ConfiguratorSession, result: MutationResult | None = None, **extra):
    data = {"session_id": session_id, "session": session.to_dict(), **extra}
    if result is not None:
        data["result"] = result.to_dict()
    return JsonResponse(data)


def configurator_session_api(view_func):
    """Load the user's session and parse the JSON body; save the session afterwards."""

    @wraps(view_func)
    def wrapper(request, session_id, *args, **kwargs):
        key = _user_session_id(request, session_id)
        session = session_store.load_session(key, publisher=get_publisher())
        if session is None:
            return JsonResponse({"error": "Session not found"}, status=404)

        data = {}
        if request.method == "POST":
            try:
                data = json.loads(request.body or b"{}")
            except json.JSONDecodeError:
                return JsonResponse({"error": "Invalid JSON"}, status=400)
            if not isinstance(data, dict):
                return JsonResponse({"error": "Expected a JSON object"}, status=400)

        response = view_func(request, session_id, session, data, *args, **kwargs)
        if response.status_code < 400:
            session_store.save_session(key, session)
        return response

    return wrapper


# =============================================================================
# Catalog
# =============================================================================


@login_required
@require_GET
def catalog_api(request, program_type):
    """List the sections available for a program type and capability set."""
    try:
        program_type = ProgramType(program_type)
    except ValueError:
        return JsonResponse({"error": f"Unknown program type: {program_type}"}, status=400)

    sections = get_sections_for_program_type(program_type, _capabilities_from_query(request))
    return JsonResponse({"program_type": str(program_type), "sections": [item.to_dict() for item in sections]})


@login_required
@require_GET
def section_schema_api(request, section_key):
    schema = get_section_schema(section_key)
    if schema is None:
        return JsonResponse({"error": f"No configuration for section: {section_key}"}, status=404)
    return JsonResponse({"section": section_key, "schema": schema.to_dict()})


# =============================================================================
# Configurator sessions
# =============================================================================


@login_required
@require_POST
def start_session_api(request):
    """
    Start a configurator session.

    Body:
        {"template": {"id", "name", "capabilities", "allowed_program_types"},
         "program_type": "loyalty", "capabilities": [...] (optional)}
    """
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        return JsonResponse({"error": "Invalid JSON"}, status=400)

    template_data = data.get("template") if isinstance(data, dict) else None
    if not isinstance(template_data, dict) or not template_data.get("id"):
        return JsonResponse({"error": "template with an id is required"}, status=400)

    try:
        template = TemplateDescriptor.build(**template_data)
        program_type = ProgramType(data.get("program_type"))
    except (TypeError, ValueError) as e:
        return JsonResponse({"error": str(e)}, status=400)

    capabilities = data.get("capabilities")
    if capabilities is not None and not isinstance(capabilities, list):
        return JsonResponse({"error": "capabilities must be a list"}, status=400)

    session = ConfiguratorSession()
    try:
        session.initialize_draft_spec(template, program_type, capabilities)
    except ProgramTypeNotAllowed as e:
        return JsonResponse({"error": str(e)}, status=400)

    session_id = session_store.new_session_id()
    session_store.save_session(_user_session_id(request, session_id), session)
    logger.info(f"Started configurator session {session_id} for template {template.id}")
    return _session_response(session_id, session)


@login_required
@require_GET
@configurator_session_api
def get_session_api(request, session_id, session, data):
    return _session_response(session_id, session)


@login_required
@require_POST
def delete_session_api(request, session_id):
    session_store.delete_session(_user_session_id(request, session_id))
    return JsonResponse({"success": True})


@login_required
@require_POST
@configurator_session_api
def toggle_section_api(request, session_id, session, data):
    section_key = data.get("section")
    if not section_key or not isinstance(section_key, str):
        return JsonResponse({"error": "section is required"}, status=400)
    return _session_response(session_id, session, session.toggle_section(section_key))


@login_required
@require_POST
@configurator_session_api
def reorder_sections_api(request, session_id, session, data):
    order = data.get("order")
    if not _is_string_list(order):
        return JsonResponse({"error": "order must be a list of section keys"}, status=400)
    return _session_response(session_id, session, session.reorder_sections(order))


@login_required
@require_POST
@configurator_session_api
def reset_sections_api(request, session_id, session, data):
    preset = data.get("preset", "standard")
    return _session_response(session_id, session, session.reset_sections(str(preset)))


@login_required
@require_POST
@configurator_session_api
def update_config_api(request, session_id, session, data):
    """
    Update section or program configuration.

    Body, one of:
        {"section": "qrCheckInButton", "path": "rules.loyalty.check_in.points", "value": 10}
        {"section": "balanceHeader", "props": ["member.points_balance"]}
        {"program": {"earning": {...}, "copy": {...}}}
    """
    if "program" in data:
        updates = data["program"]
        if not isinstance(updates, dict):
            return JsonResponse({"error": "program must be an object"}, status=400)
        try:
            result = session.update_program_config(**updates)
        except TypeError as e:
            return JsonResponse({"error": str(e)}, status=400)
        return _session_response(session_id, session, result)

    section_key = data.get("section")
    if not section_key or not isinstance(section_key, str):
        return JsonResponse({"error": "section is required"}, status=400)

    if "props" in data:
        if not _is_string_list(data["props"]):
            return JsonResponse({"error": "props must be a list of binding paths"}, status=400)
        return _session_response(session_id, session, session.update_section_props(section_key, data["props"]))

    if not data.get("path") or not isinstance(data["path"], str) or "value" not in data:
        return JsonResponse({"error": "path and value are required"}, status=400)
    return _session_response(
        session_id, session, session.update_section_config(section_key, data["path"], data["value"])
    )


@login_required
@require_POST
@configurator_session_api
def step_api(request, session_id, session, data):
    """Move between configurator steps: {"step": "branding"} or {"direction": "next" | "prev"}."""
    direction = data.get("direction")
    if direction == "next":
        session.next_step()
    elif direction == "prev":
        session.prev_step()
    elif data.get("step"):
        try:
            session.go_to_step(data["step"])
        except ValueError:
            return JsonResponse({"error": f"Unknown step: {data['step']}"}, status=400)
    else:
        return JsonResponse({"error": "step or direction is required"}, status=400)
    return _session_response(session_id, session)


@login_required
@require_POST
@configurator_session_api
def publish_api(request, session_id, session, data):
    program_id = data.get("program_id")
    if not program_id:
        return JsonResponse({"error": "program_id is required"}, status=400)

    try:
        result = async_to_sync(session.publish_configuration)(str(program_id))
    except PublishError as e:
        # The draft is unchanged and stays in the store
        session_store.save_session(_user_session_id(request, session_id), session)
        return JsonResponse({"error": e.reason}, status=502)

    return _session_response(session_id, session, publish=result.asdict())
