from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    model = User
    list_display = ('username', 'email', 'role', 'blood_type', 'donation_count', 'last_donation', 'is_active')
    list_filter = ('role', 'blood_type', 'is_active')
    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Blood bank', {'fields': ('role', 'blood_type', 'phone', 'date_of_birth', 'gender',
                                   'address', 'medical_history')}),
        ('Donation record', {'fields': ('last_donation', 'donation_count', 'is_eligible')}),
    )
    readonly_fields = ('last_donation', 'donation_count', 'is_eligible')
