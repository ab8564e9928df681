import logging
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.utils import translation
from django.utils.translation import gettext

logger = logging.getLogger(__name__)

# Sends never share a failure: notify_app_disabled catches and logs its own errors.
notice_executor = ThreadPoolExecutor(
    max_workers=getattr(settings, "APP_STORE_NOTICE_WORKERS", 4),
    thread_name_prefix="app-disabled-notice",
)


def _default_locale():
    return getattr(settings, "APP_STORE_DEFAULT_LOCALE", "en")


def _disabled_app_message(app_name, categories, event_type_titles):
    context = {"app_name": app_name}
    subject = gettext("%(app_name)s has been disabled") % context
    lines = [gettext("Hello,"), ""]
    if event_type_titles:
        lines.append(
            gettext("An administrator disabled %(app_name)s. It was turned off on these event types:") % context
        )
        lines.extend(f"  - {title}" for title in event_type_titles)
    elif "calendar" in categories:
        lines.append(
            gettext(
                "An administrator disabled %(app_name)s. Your bookings will no longer be checked "
                "against or written to this calendar."
            )
            % context
        )
    elif "video" in categories:
        lines.append(
            gettext(
                "An administrator disabled %(app_name)s. Event types using it as a location need "
                "a new conferencing app."
            )
            % context
        )
    else:
        lines.append(gettext("An administrator disabled %(app_name)s.") % context)
    lines.extend(["", gettext("Regards,"), gettext("The scheduling team")])
    return subject, "\n".join(lines)


def notify_app_disabled(recipient_email, app_name, categories, event_type_titles=(), locale=None):
    """Email one user that an app they rely on was disabled. Returns True when the send succeeded."""
    with translation.override(locale or _default_locale()):
        subject, message = _disabled_app_message(app_name, list(categories or []), list(event_type_titles or []))

    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
            recipient_list=[recipient_email],
            fail_silently=False,
        )
    except Exception:
        logger.exception("disabled_app_email_failed app=%s recipient=%s", app_name, recipient_email)
        return False
    return True


def submit_disabled_notices(notices):
    """Queue one send per notice on the worker pool and return the futures without waiting."""
    futures = [notice_executor.submit(notify_app_disabled, **notice) for notice in notices]
    logger.info("disabled_app_notices_queued count=%s", len(futures))
    return futures


def dispatch_disabled_notices(notices):
    """Queue the notices once the surrounding transaction commits; the caller never waits on them."""
    notices = list(notices)
    if not notices:
        return
    transaction.on_commit(lambda: submit_disabled_notices(notices))
