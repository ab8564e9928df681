"""Per-app validation of the configuration keys an admin can store.

Each bundled app that needs credentials has a form; the form's fields are
both the validator and the list of key names shown before any keys exist.
"""

from django import forms


def _prefixed(prefix):
    def validator(value):
        if not value.startswith(prefix):
            raise forms.ValidationError(f'Must start with "{prefix}".')

    return validator


class GoogleCalendarKeysForm(forms.Form):
    client_id = forms.CharField()
    client_secret = forms.CharField()
    redirect_uris = forms.CharField()


class Office365CalendarKeysForm(forms.Form):
    client_id = forms.CharField()
    client_secret = forms.CharField()


class ZoomVideoKeysForm(forms.Form):
    client_id = forms.CharField()
    client_secret = forms.CharField()


class DailyVideoKeysForm(forms.Form):
    api_key = forms.CharField()
    scale_plan = forms.ChoiceField(choices=[("false", "false"), ("true", "true")], required=False)

    def clean_scale_plan(self):
        return self.cleaned_data.get("scale_plan") or "false"


class StripePaymentKeysForm(forms.Form):
    client_id = forms.CharField(validators=[_prefixed("ca_")])
    private_key = forms.CharField(validators=[_prefixed("sk_")])
    public_key = forms.CharField(validators=[_prefixed("pk_")])
    webhook_secret = forms.CharField(validators=[_prefixed("whsec_")])


class GiphyKeysForm(forms.Form):
    api_key = forms.CharField()


APP_KEYS_SCHEMAS = {
    "googlecalendar": GoogleCalendarKeysForm,
    "office365calendar": Office365CalendarKeysForm,
    "zoomvideo": ZoomVideoKeysForm,
    "dailyvideo": DailyVideoKeysForm,
    "stripepayment": StripePaymentKeysForm,
    "giphy": GiphyKeysForm,
}


def derive_app_dict_key_from_type(app_type, mapping):
    """Find the key ``mapping`` uses for an app type such as ``zoom_video``.

    Tries the type itself, the type without its ``_category`` suffix
    (``giphy_other`` -> ``giphy``), the type with the suffix glued on
    (``zoom_video`` -> ``zoomvideo``) and finally the type with every ``_``/``-``
    removed. Falls back to the type unchanged.
    """
    if app_type in mapping:
        return app_type
    head, sep, tail = app_type.rpartition("_")
    if sep:
        if head in mapping:
            return head
        if head + tail in mapping:
            return head + tail
    squashed = app_type.replace("_", "").replace("-", "")
    if squashed in mapping:
        return squashed
    return app_type


def keys_schema_for_type(app_type):
    if not app_type:
        return None
    return APP_KEYS_SCHEMAS.get(derive_app_dict_key_from_type(app_type, APP_KEYS_SCHEMAS))


def schema_key_names(schema):
    return list(schema.base_fields)
