from django.contrib import admin
from django.urls import path, re_path, include
from rest_framework.routers import DefaultRouter
from logistics.views import (
    AutoAssignView,
    DispatchConfigView,
    DispatchLogListView,
    DispatchZoneViewSet,
    ManualAssignView,
)

# Trailing slash is optional: clients PUT/POST to /dispatch/config and
# APPEND_SLASH cannot redirect those methods.
router = DefaultRouter(trailing_slash='/?')
router.register(r'dispatch/zones', DispatchZoneViewSet, basename='dispatch-zone')

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include(router.urls)),
    re_path(r'^api/v1/dispatch/config/?$', DispatchConfigView.as_view(), name='dispatch-config'),
    re_path(r'^api/v1/dispatch/assign/?$', ManualAssignView.as_view(), name='dispatch-assign'),
    re_path(r'^api/v1/dispatch/auto-assign/?$', AutoAssignView.as_view(), name='dispatch-auto-assign'),
    re_path(r'^api/v1/dispatch/logs/?$', DispatchLogListView.as_view(), name='dispatch-logs'),
]
