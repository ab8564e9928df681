import json

from django.contrib import messages
from django.core.exceptions import ValidationError
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from accounts.decorators import admin_api_required, admin_required

from .catalog import VARIANT_CALENDAR, VARIANTS
from .models import App
from .services import list_local, save_keys, set_enabled


def _flat_validation_errors(exc):
    if hasattr(exc, "error_dict"):
        return {field: [str(m) for m in msgs] for field, msgs in exc.message_dict.items()}
    return {"__all__": exc.messages}


def _json_body(request):
    try:
        payload = json.loads(request.body or b"{}")
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _key_fields(keys):
    """(name, is_stored) pairs for the key form; stored values never reach the page."""
    if isinstance(keys, dict):
        return [(name, bool(value)) for name, value in keys.items()]
    if isinstance(keys, list):
        return [(name, False) for name in keys]
    return []


def _posted_keys(request, slug):
    # A blank field keeps the stored value.
    stored = App.objects.filter(slug=slug).values_list("keys", flat=True).first() or {}
    keys = {}
    for field, value in request.POST.items():
        if field.startswith("keys-"):
            name = field[len("keys-"):]
            keys[name] = value or stored.get(name, "")
    return keys


@require_GET
@admin_api_required
def list_local_api(request):
    variant = (request.GET.get("variant") or "").strip()
    if not variant:
        return JsonResponse({"error": "variant is required"}, status=400)
    return JsonResponse({"apps": list_local(variant)})


@require_POST
@admin_api_required
def set_enabled_api(request):
    payload = _json_body(request)
    if payload is None:
        return JsonResponse({"error": "Request body must be a JSON object."}, status=400)

    slug = payload.get("slug")
    enabled = payload.get("enabled")
    if not isinstance(slug, str) or not slug or not isinstance(enabled, bool):
        return JsonResponse({"error": "slug (string) and enabled (boolean) are required"}, status=400)

    try:
        stored = set_enabled(slug, enabled, actor=request.user)
    except App.DoesNotExist:
        return JsonResponse({"error": "NOT_FOUND"}, status=404)
    return JsonResponse({"enabled": stored})


@require_POST
@admin_api_required
def save_keys_api(request):
    payload = _json_body(request)
    if payload is None:
        return JsonResponse({"ok": False, "errors": {"__all__": ["Request body must be a JSON object."]}}, status=400)

    slug = payload.get("slug")
    app_type = payload.get("type")
    if not isinstance(slug, str) or not slug or not isinstance(app_type, str) or not app_type:
        return JsonResponse({"ok": False, "errors": {"__all__": ["slug and type are required."]}}, status=400)

    try:
        save_keys(slug, app_type, payload.get("keys"), actor=request.user)
    except ValidationError as exc:
        return JsonResponse({"ok": False, "errors": _flat_validation_errors(exc)}, status=400)
    except App.DoesNotExist:
        return JsonResponse({"ok": False, "error": "NOT_FOUND"}, status=404)
    return JsonResponse({"ok": True})


@admin_required
def admin_apps_view(request, variant=VARIANT_CALENDAR):
    if request.method == "POST":
        action = request.POST.get("action")
        slug = request.POST.get("slug", "")

        if action == "set_enabled":
            enabled = request.POST.get("enabled") == "true"
            try:
                set_enabled(slug, enabled, actor=request.user)
            except App.DoesNotExist:
                raise Http404("App not found")
            messages.success(request, f'{slug} {"enabled" if enabled else "disabled"}.')
            return redirect("app_store:admin_apps", variant=variant)

        if action == "save_keys":
            keys = _posted_keys(request, slug)
            try:
                save_keys(slug, request.POST.get("type", ""), keys, actor=request.user)
            except App.DoesNotExist:
                raise Http404("App not found")
            except ValidationError as exc:
                messages.error(request, f'Keys for {slug} were not saved: {"; ".join(exc.messages)}')
            else:
                messages.success(request, f"Keys for {slug} saved.")
            return redirect("app_store:admin_apps", variant=variant)

    apps = list_local(variant)
    for app in apps:
        app["key_fields"] = _key_fields(app["keys"])
    return render(
        request,
        "app_store/admin_apps.html",
        {
            "apps": apps,
            "variant": variant,
            "variants": VARIANTS,
        },
    )
