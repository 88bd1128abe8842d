"""Report API routes (all PIN protected)."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import PSGReportViewSet, SalesReportViewSet, VerifyReportsPinView

router = SimpleRouter()
router.register(r'psg', PSGReportViewSet, basename='psg-report')
router.register(r'', SalesReportViewSet, basename='sales-report')

urlpatterns = [
    path('verify-pin/', VerifyReportsPinView.as_view(), name='reports_verify_pin'),
    path('', include(router.urls)),
]
