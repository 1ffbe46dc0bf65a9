import django_filters

from bloodrequests.models import BloodRequest


class BloodRequestFilter(django_filters.FilterSet):
    blood_type = django_filters.ChoiceFilter(choices=BloodRequest._meta.get_field('blood_type').choices)
    urgency = django_filters.ChoiceFilter(choices=BloodRequest._meta.get_field('urgency').choices)
    status = django_filters.ChoiceFilter(choices=BloodRequest.STATUS_CHOICES)
    city = django_filters.CharFilter(lookup_expr='icontains')
    needed_after = django_filters.DateFilter(field_name='needed_by', lookup_expr='gte')

    class Meta:
        model = BloodRequest
        fields = ['blood_type', 'urgency', 'status', 'city']
