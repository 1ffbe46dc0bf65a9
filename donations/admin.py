from django.contrib import admin

from .models import Donation


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display  = ['id', 'donor', 'blood_request', 'units', 'status', 'donation_date', 'created_at']
    list_filter   = ['status', 'donation_date']
    search_fields = ['donor__full_name', 'blood_request__hospital_name']
    ordering      = ['-created_at']
    readonly_fields = ['blood_request', 'donor', 'created_at', 'updated_at']
    list_select_related = ['donor', 'blood_request']

    # Status changes go through the lifecycle so transitions stay valid
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_readonly_fields(self, request, obj=None):
        return self.readonly_fields + ['status']
