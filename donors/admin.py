from django.contrib import admin

from .models import DonorProfile


@admin.register(DonorProfile)
class DonorProfileAdmin(admin.ModelAdmin):
    list_display   = ['full_name', 'blood_type', 'city', 'is_available', 'last_donation_date', 'can_donate_display']
    list_filter    = ['blood_type', 'is_available', 'city']
    search_fields  = ['full_name', 'user__username', 'user__email', 'city']
    ordering       = ['full_name']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Personal Info', {
            'fields': ('user', 'full_name', 'blood_type', 'address', 'city')
        }),
        ('Location', {
            'fields': ('latitude', 'longitude')
        }),
        ('Donation', {
            'fields': ('is_available', 'last_donation_date')
        }),
        ('Health', {
            'fields': ('date_of_birth', 'weight_kg', 'health_conditions'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    @admin.display(boolean=True, description='Can Donate Now')
    def can_donate_display(self, obj):
        return obj.can_donate

    actions = ['mark_available', 'mark_unavailable']

    @admin.action(description='Mark selected donors as available')
    def mark_available(self, request, queryset):
        updated = queryset.update(is_available=True)
        self.message_user(request, f'{updated} donor(s) marked available.')

    @admin.action(description='Mark selected donors as unavailable')
    def mark_unavailable(self, request, queryset):
        updated = queryset.update(is_available=False)
        self.message_user(request, f'{updated} donor(s) marked unavailable.')
