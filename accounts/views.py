"""Accounts app views.

Contains:
- Owner registration (public)
- Business profile APIs (details used on bills and for GST)
- Reports PIN management
"""

import logging

from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .models import BusinessProfile
from .serializers import BusinessProfileSerializer, RegisterSerializer, ReportsPinSerializer
from .services import set_reports_pin

logger = logging.getLogger(__name__)


class RegisterView(generics.CreateAPIView):
    """Public registration endpoint."""
    queryset = RegisterSerializer.Meta.model.objects.all()
    permission_classes = [AllowAny]
    serializer_class = RegisterSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info('Registered user %s', user.pk)


class BusinessProfileViewSet(viewsets.GenericViewSet):
    """Authenticated business profile management.

    A profile is created lazily the first time it is saved.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = BusinessProfileSerializer

    def get_queryset(self):
        return BusinessProfile.objects.filter(user=self.request.user)

    @action(detail=False, methods=['get', 'put', 'patch'])
    def me(self, request):
        """Get or create/update the authenticated owner's business profile."""
        profile = self.get_queryset().first()
        if request.method == 'GET':
            if profile is None:
                return Response({'business_profile': None})
            return Response(self.get_serializer(profile).data)

        if profile is None:
            profile = BusinessProfile(user=request.user)
        serializer = self.get_serializer(profile, data=request.data, partial=(request.method == 'PATCH'))
        serializer.is_valid(raise_exception=True)
        serializer.save(user=request.user)
        return Response(serializer.data)

    @action(detail=False, methods=['post'], url_path='pin')
    def set_pin(self, request):
        """Set or replace the 4-digit PIN protecting the reports."""
        serializer = ReportsPinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        set_reports_pin(request.user, serializer.validated_data['pin'])
        return Response({'detail': 'Reports PIN set successfully.'}, status=status.HTTP_200_OK)
