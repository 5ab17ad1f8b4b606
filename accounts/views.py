import logging

from django.contrib.auth import get_user_model
from django.db.models import Q
from rest_framework import generics, status, permissions
from rest_framework.views import APIView

from .exceptions import NotFound
from .pagination import StandardPagination, apply_sort
from .permissions import IsAdmin, IsDonor
from .serializers import RegisterSerializer, ProfileSerializer, UserSummarySerializer
from .utils import success_response, error_response

User = get_user_model()
logger = logging.getLogger(__name__)


class RegisterView(generics.CreateAPIView):
    serializer_class = RegisterSerializer
    permission_classes = (permissions.AllowAny,)
    authentication_classes = ()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                'Unable to register or account created earlier',
                code='invalid_input',
                errors=serializer.errors,
                status_code=status.HTTP_400_BAD_REQUEST
            )

        user = serializer.save()
        logger.info('Registered %s account %s', user.role, user.username)
        data = {"id": user.id, "username": user.username, "email": user.email,
                "role": user.role, "blood_type": user.blood_type}
        return success_response(
            'Register successful',
            data=data,
            status_code=status.HTTP_201_CREATED
        )


class ProfileView(generics.RetrieveUpdateAPIView):
    serializer_class = ProfileSerializer

    def get_object(self):
        return self.request.user

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return success_response('Profile retrieved', serializer.data)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        user = self.get_object()
        serializer = self.get_serializer(user, data=request.data, partial=partial)
        if not serializer.is_valid():
            return error_response('Unable to update profile', code='invalid_input',
                                  errors=serializer.errors)
        serializer.save()
        return success_response('Profile updated successfully', serializer.data)


class EligibilityView(APIView):
    """Donation eligibility for the current donor."""
    permission_classes = (IsDonor,)

    def get(self, request):
        user = request.user
        eligible = user.check_eligibility()
        if user.is_eligible != eligible:
            user.is_eligible = eligible
            user.save(update_fields=['is_eligible'])

        data = {
            'eligible': eligible,
            'last_donation': user.last_donation,
            'next_eligible_date': None if eligible else user.next_eligible_date,
            'donation_count': user.donation_count,
        }
        return success_response('Eligibility retrieved', data=data)


class UserListView(generics.ListAPIView):
    """List users (admin only)"""
    serializer_class = UserSummarySerializer
    permission_classes = (IsAdmin,)
    pagination_class = StandardPagination

    def get_queryset(self):
        queryset = User.objects.all()

        role = self.request.query_params.get('role')
        if role:
            queryset = queryset.filter(role=role)

        blood_type = self.request.query_params.get('blood_type')
        if blood_type:
            queryset = queryset.filter(blood_type=blood_type)

        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(username__icontains=search) | Q(email__icontains=search) |
                Q(first_name__icontains=search) | Q(last_name__icontains=search)
            )

        return apply_sort(queryset, self.request, ('date_joined', 'username', 'donation_count'), '-date_joined')


class ToggleUserStatusView(APIView):
    """Activate or deactivate an account (admin only)"""
    permission_classes = (IsAdmin,)

    def patch(self, request, pk):
        try:
            user = User.objects.get(pk=pk)
        except User.DoesNotExist:
            raise NotFound('User not found')

        user.is_active = not user.is_active
        user.save(update_fields=['is_active'])
        logger.info('User %s %s by %s', user.username,
                    'activated' if user.is_active else 'deactivated', request.user.username)

        return success_response(
            f"User {'activated' if user.is_active else 'deactivated'} successfully",
            data={'id': user.id, 'username': user.username, 'email': user.email,
                  'is_active': user.is_active}
        )
