from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(pattern_name='availability:list', permanent=False), name='root'),
    # Sign-in must not depend on the admin site being mounted.
    path('accounts/', include('django.contrib.auth.urls')),
    path('availability/', include('availability.urls')),
    path('apps/', include(('app_store.urls', 'app_store'), namespace='app_store')),
]

if getattr(settings, 'ENABLE_DJANGO_ADMIN', False):
    urlpatterns.insert(1, path('admin/', admin.site.urls))
