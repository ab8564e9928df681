import json
import logging

from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from event_types.models import EventType

from .catalog import VARIANT_CONFERENCING, get_app_metadata, get_local_app_metadata
from .keys_schemas import keys_schema_for_type, schema_key_names
from .models import App, AuditLog, Credential
from .notifications import dispatch_disabled_notices

logger = logging.getLogger(__name__)

# Apps in these categories are tied to users through credentials rather than event types.
CREDENTIAL_CATEGORIES = (App.CATEGORY_CALENDAR, App.CATEGORY_VIDEO)


def _json_safe(value):
    if value is None:
        return {}
    return json.loads(json.dumps(value, cls=DjangoJSONEncoder, default=str))


def log_audit(actor, action, instance, changes=None):
    return AuditLog.objects.create(
        actor=actor if getattr(actor, "is_authenticated", False) else None,
        action=action,
        model_label=instance._meta.label,
        object_pk=str(instance.pk),
        object_repr=str(instance),
        changes=_json_safe(changes),
    )


def resolve_category(variant):
    return App.CATEGORY_VIDEO if variant == VARIANT_CONFERENCING else variant


def list_local(variant):
    """Bundled apps of one variant merged with their stored state, in catalog order.

    Apps without stored keys expose only the names of the keys their schema
    expects, never values.
    """
    category = resolve_category(variant)
    stored = {app.slug: app for app in App.objects.all() if category in (app.categories or [])}

    results = []
    for meta in get_local_app_metadata():
        if meta["variant"] != variant:
            continue
        row = stored.get(meta["slug"])
        if row is not None and row.keys:
            keys = row.keys
        else:
            schema = keys_schema_for_type(meta["type"])
            keys = schema_key_names(schema) if schema else None
        results.append(
            {
                "name": meta["name"],
                "slug": meta["slug"],
                "logo": meta["logo"],
                "title": meta.get("title"),
                "type": meta["type"],
                "description": meta["description"],
                "keys": keys,
                "enabled": bool(row and row.enabled),
            }
        )
    return results


def _user_locale(user):
    profile = getattr(user, "profile", None)
    return getattr(profile, "locale", None) or None


def _credential_notices(app, app_name):
    notices = []
    seen = set()
    credentials = Credential.objects.filter(app=app).select_related("user", "user__profile").order_by("id")
    for credential in credentials:
        user = credential.user
        if user.pk in seen or not user.email:
            continue
        seen.add(user.pk)
        notices.append(
            {
                "recipient_email": user.email,
                "app_name": app_name,
                "categories": list(app.categories or []),
                "locale": _user_locale(user),
            }
        )
    return notices


def _disable_in_event_types(app, app_name):
    event_types = list(
        EventType.objects.select_for_update()
        .filter(**{f"metadata__apps__{app.slug}__enabled": True})
        .order_by("id")
    )

    recipients = {}
    for event_type in event_types:
        event_type.disable_app(app.slug)
        event_type.save(update_fields=["metadata", "updated_at"])
        for user in event_type.users.select_related("profile").order_by("id"):
            if not user.email:
                continue
            entry = recipients.setdefault(user.pk, {"user": user, "titles": []})
            entry["titles"].append(event_type.title)

    logger.info("app_disabled_on_event_types app=%s event_types=%s", app.slug, len(event_types))
    return [
        {
            "recipient_email": entry["user"].email,
            "app_name": app_name,
            "categories": list(app.categories or []),
            "event_type_titles": entry["titles"],
            "locale": _user_locale(entry["user"]),
        }
        for entry in recipients.values()
    ]


def set_enabled(slug, enabled, actor=None):
    """Store ``enabled`` as the app's flag and return the stored value.

    Disabling notifies affected users after commit: credential holders for
    calendar and video apps, otherwise the rosters of every event type that
    had the app switched on (those event types get the app switched off).
    """
    enabled = bool(enabled)
    with transaction.atomic():
        app = App.objects.select_for_update().get(slug=slug)
        previous = app.enabled
        app.enabled = enabled
        app.save(update_fields=["enabled", "updated_at"])

        notices = []
        if not enabled:
            meta = get_app_metadata(app.slug)
            app_name = meta["name"] if meta else app.slug
            if app.has_category(*CREDENTIAL_CATEGORIES):
                notices = _credential_notices(app, app_name)
            else:
                notices = _disable_in_event_types(app, app_name)

        log_audit(
            actor,
            AuditLog.ACTION_ENABLE if enabled else AuditLog.ACTION_DISABLE,
            app,
            {"before": previous, "after": enabled, "notified": len(notices)},
        )
        dispatch_disabled_notices(notices)

    logger.info("app_enabled_set app=%s enabled=%s previous=%s", app.slug, enabled, previous)
    return app.enabled


def save_keys(slug, app_type, keys, actor=None):
    """Validate ``keys`` against the app type's schema and store the cleaned values.

    Nothing is written when validation fails.
    """
    schema = keys_schema_for_type(app_type)
    if schema is None:
        raise ValidationError({"type": f"No key schema is registered for app type {app_type!r}."})
    if not isinstance(keys, dict):
        raise ValidationError({"keys": "Keys must be an object."})

    form = schema(data=keys)
    if not form.is_valid():
        raise ValidationError(form.errors.as_data())

    with transaction.atomic():
        app = App.objects.select_for_update().get(slug=slug)
        app.keys = dict(form.cleaned_data)
        app.save(update_fields=["keys", "updated_at"])
        log_audit(actor, AuditLog.ACTION_SAVE_KEYS, app, {"type": app_type, "key_names": sorted(form.cleaned_data)})

    logger.info("app_keys_saved app=%s type=%s", slug, app_type)
    return app
