from django.urls import path

from . import views

app_name = 'availability'

urlpatterns = [
    path('', views.availability_list_view, name='list'),
    path('api/schedule/<str:schedule>/', views.schedule_api, name='schedule_api'),
    path('api/schedule/<str:schedule>/update/', views.schedule_update_api, name='schedule_update_api'),
    path('api/event-types/', views.event_types_api, name='event_types_api'),

    path('<str:schedule>/', views.schedule_edit_view, name='edit'),
]
