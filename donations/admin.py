from django.contrib import admin
from .models import Inventory, ExpiringBatch, Donation, BloodRequest, InventoryTransaction


class ExpiringBatchInline(admin.TabularInline):
    model = ExpiringBatch
    extra = 0
    fields = ('expiry_date', 'units', 'created_at')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Inventory)
class InventoryAdmin(admin.ModelAdmin):
    list_display = ('blood_type', 'units_available', 'reserved_units', 'minimum_threshold',
                    'max_capacity', 'low_stock', 'last_updated')
    search_fields = ('blood_type',)
    # Stock changes go through InventoryService so they are audited
    readonly_fields = ('units_available', 'last_updated', 'created_at')
    inlines = [ExpiringBatchInline]

    @admin.display(boolean=True, description='Low stock')
    def low_stock(self, obj):
        return obj.is_low_stock

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ('donor', 'blood_type', 'units_collected', 'status', 'donation_date', 'staff_member')
    list_filter = ('status', 'blood_type', 'donation_date')
    search_fields = ('donor__username', 'donor__email', 'blood_type')
    readonly_fields = ('donor', 'blood_type', 'units_collected', 'status', 'staff_member',
                       'created_at', 'updated_at')

    def has_add_permission(self, request):
        return False


@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display = ('requester', 'patient_name', 'blood_type', 'units_needed', 'hospital_name',
                    'urgency', 'status', 'required_date', 'created_at')
    list_filter = ('status', 'blood_type', 'urgency', 'created_at')
    search_fields = ('patient_name', 'hospital_name', 'requester__username')
    readonly_fields = ('requester', 'blood_type', 'units_needed', 'status', 'approved_by',
                       'approved_date', 'fulfilled_date', 'created_at', 'updated_at')

    def has_add_permission(self, request):
        return False


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(admin.ModelAdmin):
    """Audit log, view only."""
    list_display = ('transaction_type', 'blood_type', 'quantity', 'reference_id', 'timestamp')
    list_filter = ('transaction_type', 'blood_type', 'timestamp')
    search_fields = ('blood_type', 'notes')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
