"""Item catalog API routes."""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import ItemViewSet

router = SimpleRouter()
router.register(r'', ItemViewSet, basename='item')

urlpatterns = [
    path('', include(router.urls)),
]
