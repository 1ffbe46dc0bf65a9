import django_filters

from donations.models import Donation


class DonationFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Donation.STATUS_CHOICES)

    class Meta:
        model = Donation
        fields = ['status']
