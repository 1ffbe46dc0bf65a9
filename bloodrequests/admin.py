# bloodrequests/admin.py
from django.contrib import admin, messages
from django.db.models import Count, Q
from django.utils.html import format_html

from algorithms.exceptions import MatchingError
from bloodrequests.models import BloodRequest
from bloodrequests.services import cancel_request


@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'hospital_name',
        'blood_type',
        'units_needed',
        'urgency',
        'status',
        'needed_by',
        'donation_count',
    ]
    list_filter = ['status', 'urgency', 'blood_type', 'created_at']
    search_fields = ['hospital_name', 'city', 'contact_name', 'requester__username']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Request Information', {
            'fields': ('requester', 'blood_type', 'units_needed', 'urgency',
                       'needed_by', 'description', 'status')
        }),
        ('Hospital', {
            'fields': ('hospital_name', 'hospital_address', 'city', 'latitude', 'longitude',
                       'contact_name', 'contact_phone')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['cancel_selected_requests']

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            total_donations=Count('donations'),
            completed_donations=Count('donations', filter=Q(donations__status='completed')),
        )

    @admin.display(description='Donations')
    def donation_count(self, obj):
        return format_html(
            'Total: {} | <span style="color: green;">Completed: {}</span>',
            obj.total_donations, obj.completed_donations,
        )

    @admin.action(description='Cancel selected requests (and their pending donations)')
    def cancel_selected_requests(self, request, queryset):
        cancelled = skipped = 0
        for blood_request in queryset:
            try:
                cancel_request(request.user, blood_request.pk, reason='Cancelled from admin')
            except MatchingError as e:
                skipped += 1
                self.message_user(request, f"Request #{blood_request.pk}: {e}", messages.WARNING)
            else:
                cancelled += 1
        self.message_user(request, f'{cancelled} request(s) cancelled, {skipped} skipped.')
