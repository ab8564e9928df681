"""Metadata for the integrations bundled with this deployment.

The catalog is the source of truth for names, logos and descriptions; the
``App`` table only stores per-deployment state (enabled flag and keys).
Order matters: listings follow the order below.
"""

VARIANT_CALENDAR = "calendar"
VARIANT_CONFERENCING = "conferencing"
VARIANT_PAYMENT = "payment"
VARIANT_OTHER = "other"

VARIANTS = [VARIANT_CALENDAR, VARIANT_CONFERENCING, VARIANT_PAYMENT, VARIANT_OTHER]

LOCAL_APPS = [
    {
        "name": "Google Calendar",
        "slug": "google-calendar",
        "dir_name": "googlecalendar",
        "type": "google_calendar",
        "variant": VARIANT_CALENDAR,
        "categories": ["calendar"],
        "logo": "/api/app-store/googlecalendar/icon.svg",
        "title": "Google Calendar",
        "description": "Google Calendar is a time management and scheduling service developed by Google.",
    },
    {
        "name": "Outlook Calendar",
        "slug": "office365-calendar",
        "dir_name": "office365calendar",
        "type": "office365_calendar",
        "variant": VARIANT_CALENDAR,
        "categories": ["calendar"],
        "logo": "/api/app-store/office365calendar/icon.svg",
        "title": "Outlook Calendar",
        "description": "Microsoft Office 365 is a suite of apps that helps you stay connected with others.",
    },
    {
        "name": "CalDav Server",
        "slug": "caldav-calendar",
        "dir_name": "caldavcalendar",
        "type": "caldav_calendar",
        "variant": VARIANT_CALENDAR,
        "categories": ["calendar"],
        "logo": "/api/app-store/caldavcalendar/icon.svg",
        "title": "CalDav Server",
        "description": "Connect any calendar server that speaks CalDav.",
    },
    {
        "name": "Zoom Video",
        "slug": "zoom",
        "dir_name": "zoomvideo",
        "type": "zoom_video",
        "variant": VARIANT_CONFERENCING,
        "categories": ["video"],
        "logo": "/api/app-store/zoomvideo/icon.svg",
        "title": "Zoom Video",
        "description": "Zoom is a secure and reliable video platform for all of your communication needs.",
    },
    {
        "name": "Daily Video",
        "slug": "daily-video",
        "dir_name": "dailyvideo",
        "type": "daily_video",
        "variant": VARIANT_CONFERENCING,
        "categories": ["video"],
        "logo": "/api/app-store/dailyvideo/icon.svg",
        "title": "Daily Video",
        "description": "Built-in video conferencing for every booking.",
    },
    {
        "name": "Stripe",
        "slug": "stripe",
        "dir_name": "stripepayment",
        "type": "stripe_payment",
        "variant": VARIANT_PAYMENT,
        "categories": ["payment"],
        "logo": "/api/app-store/stripepayment/icon.svg",
        "title": "Stripe",
        "description": "Collect payments for paid event types.",
    },
    {
        "name": "Giphy",
        "slug": "giphy",
        "dir_name": "giphy",
        "type": "giphy_other",
        "variant": VARIANT_OTHER,
        "categories": ["other"],
        "logo": "/api/app-store/giphy/icon.svg",
        "title": "Giphy",
        "description": "Add a GIF to the confirmation page of an event type.",
    },
    {
        "name": "Vital",
        "slug": "vital-automation",
        "dir_name": "vital",
        "type": "vital_other",
        "variant": VARIANT_OTHER,
        "categories": ["other"],
        "logo": "/api/app-store/vital/icon.svg",
        "title": "Vital",
        "description": "Schedule around sleep data from connected health devices.",
    },
]


def get_local_app_metadata():
    return [dict(app) for app in LOCAL_APPS]


def get_app_metadata(slug):
    for app in LOCAL_APPS:
        if app["slug"] == slug:
            return dict(app)
    return None
