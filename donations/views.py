from rest_framework import generics, status, permissions
from rest_framework.views import APIView

from accounts.pagination import StandardPagination, apply_sort
from accounts.permissions import IsAdmin, IsDonor, IsRecipient
from accounts.utils import success_response
from .models import Donation, BloodRequest, InventoryTransaction
from .serializers import (
    InventorySerializer,
    InventoryUpdateSerializer,
    AddUnitsSerializer,
    InventoryAlertsQuerySerializer,
    InventoryTransactionSerializer,
    DonationSerializer,
    DonationCreateSerializer,
    DonationStatusSerializer,
    BloodRequestSerializer,
    BloodRequestCreateSerializer,
    BloodRequestStatusSerializer,
)
from .services import InventoryService, DonationService, BloodRequestService


# ---------------------------------------------------------------- inventory

class InventoryListView(generics.ListAPIView):
    """List all blood type inventory levels"""
    serializer_class = InventorySerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return InventoryService.list_all()

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return success_response(
            "Inventory levels retrieved successfully",
            data=serializer.data
        )


class InventoryUpdateView(APIView):
    """Overwrite stock fields for one blood type (admin only)"""
    permission_classes = [IsAdmin]

    def patch(self, request, blood_type):
        serializer = InventoryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        inventory = InventoryService.set_fields(blood_type, **serializer.validated_data)
        return success_response(
            "Inventory updated successfully",
            data=InventorySerializer(inventory).data
        )


class InventoryAddUnitsView(APIView):
    """Restock a blood type (admin only)"""
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = AddUnitsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        inventory = InventoryService.add_units(
            data['blood_type'], data['units'], expiry_date=data.get('expiry_date')
        )
        return success_response(
            f"Added {data['units']} units of {data['blood_type']} blood",
            data=InventorySerializer(inventory).data
        )


class InventoryAlertsView(APIView):
    """Low-stock and near-expiry records (admin only)"""
    permission_classes = [IsAdmin]

    def get(self, request):
        query = InventoryAlertsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        days = query.validated_data.get('days')
        data = {
            'low_stock': InventorySerializer(InventoryService.low_stock(), many=True).data,
            'expiring': InventorySerializer(InventoryService.expiring_within(days), many=True).data,
        }
        return success_response("Inventory alerts retrieved successfully", data=data)


class InventoryTransactionListView(generics.ListAPIView):
    """Inventory audit log (admin only)"""
    serializer_class = InventoryTransactionSerializer
    permission_classes = [IsAdmin]
    pagination_class = StandardPagination

    def get_queryset(self):
        queryset = InventoryTransaction.objects.all()
        blood_type = self.request.query_params.get('blood_type')
        if blood_type:
            queryset = queryset.filter(blood_type=blood_type)
        return queryset


# ---------------------------------------------------------------- donations

class DonationCreateView(APIView):
    """Schedule a donation (donor only)"""
    permission_classes = [IsDonor]

    def post(self, request):
        serializer = DonationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        donation = DonationService.schedule(request.user, **serializer.validated_data)
        return success_response(
            "Donation scheduled successfully",
            data=DonationSerializer(donation).data,
            status_code=status.HTTP_201_CREATED
        )


class MyDonationsView(generics.ListAPIView):
    """Donations of the current user, newest first"""
    serializer_class = DonationSerializer

    def get_queryset(self):
        return (Donation.objects.filter(donor=self.request.user)
                .select_related('donor', 'staff_member')
                .order_by('-donation_date'))

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return success_response("Donations retrieved successfully", data=serializer.data)


class DonationListView(generics.ListAPIView):
    """List all donations with filtering (admin only)"""
    serializer_class = DonationSerializer
    permission_classes = [IsAdmin]
    pagination_class = StandardPagination

    def get_queryset(self):
        queryset = Donation.objects.select_related('donor', 'staff_member')

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        blood_type = self.request.query_params.get('blood_type')
        if blood_type:
            queryset = queryset.filter(blood_type=blood_type)

        return apply_sort(queryset, self.request, ('donation_date', 'created_at', 'status'), '-donation_date')


class DonationDetailView(generics.RetrieveAPIView):
    """Retrieve a specific donation (owner or admin)"""
    serializer_class = DonationSerializer

    def get_queryset(self):
        user = self.request.user
        if user.is_admin:
            return Donation.objects.all()
        return Donation.objects.filter(donor=user)

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return success_response("Donation details retrieved successfully", data=serializer.data)


class DonationStatusView(APIView):
    """Complete, cancel or reject a scheduled donation (admin only)"""
    permission_classes = [IsAdmin]

    def patch(self, request, pk):
        serializer = DonationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        donation = DonationService.update_status(pk, request.user, **serializer.validated_data)
        return success_response(
            f"Donation {donation.status} successfully",
            data=DonationSerializer(donation).data
        )


# ---------------------------------------------------------------- requests

class BloodRequestCreateView(APIView):
    """Submit a blood request (recipient only)"""
    permission_classes = [IsRecipient]

    def post(self, request):
        serializer = BloodRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        blood_request = BloodRequestService.create(request.user, **serializer.validated_data)
        return success_response(
            "Blood request submitted successfully",
            data=BloodRequestSerializer(blood_request).data,
            status_code=status.HTTP_201_CREATED
        )


class MyRequestsView(generics.ListAPIView):
    """Requests submitted by the current user, newest first"""
    serializer_class = BloodRequestSerializer

    def get_queryset(self):
        return (BloodRequest.objects.filter(requester=self.request.user)
                .select_related('requester', 'approved_by')
                .order_by('-created_at'))

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return success_response("Blood requests retrieved successfully", data=serializer.data)


class BloodRequestListView(generics.ListAPIView):
    """List all blood requests with filtering (admin only)"""
    serializer_class = BloodRequestSerializer
    permission_classes = [IsAdmin]
    pagination_class = StandardPagination

    def get_queryset(self):
        queryset = BloodRequest.objects.select_related('requester', 'approved_by')

        for param in ('status', 'blood_type', 'urgency'):
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{param: value})

        return apply_sort(queryset, self.request,
                          ('created_at', 'required_date', 'urgency', 'status'), '-created_at')


class BloodRequestDetailView(APIView):
    """Retrieve or delete a blood request (owner or admin)"""

    def get(self, request, pk):
        blood_request = BloodRequestService.get_for_user(pk, request.user)
        return success_response(
            "Blood request details retrieved successfully",
            data=BloodRequestSerializer(blood_request).data
        )

    def delete(self, request, pk):
        BloodRequestService.delete(pk, request.user)
        return success_response("Request deleted successfully")


class BloodRequestStatusView(APIView):
    """Move a blood request through its lifecycle (admin only)"""
    permission_classes = [IsAdmin]

    def patch(self, request, pk):
        serializer = BloodRequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        blood_request = BloodRequestService.update_status(pk, request.user, **serializer.validated_data)
        return success_response(
            f"Request {blood_request.status} successfully",
            data=BloodRequestSerializer(blood_request).data
        )
