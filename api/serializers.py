# api/serializers.py
from django.conf import settings
from rest_framework import serializers

from algorithms.priority import URGENCY_CHOICES
from bloodrequests.models import BloodRequest
from donations.models import Donation
from donors.models import DonorProfile


# ---------------------------
# Query parameters
# ---------------------------
class MatchQuerySerializer(serializers.Serializer):
    """
    Query string for the matching endpoints.
    Limits above MATCH_MAX_LIMIT are clamped rather than rejected.
    """
    max_distance = serializers.FloatField(required=False, min_value=0)
    limit = serializers.IntegerField(required=False, min_value=1)
    urgency = serializers.ChoiceField(choices=URGENCY_CHOICES, required=False)

    def validate(self, attrs):
        attrs.setdefault('max_distance', settings.MATCH_DEFAULT_MAX_DISTANCE_KM)
        attrs['limit'] = min(attrs.get('limit', settings.MATCH_DEFAULT_LIMIT), settings.MATCH_MAX_LIMIT)
        return attrs


# ---------------------------
# Blood requests
# ---------------------------
class BloodRequestSerializer(serializers.ModelSerializer):
    requester_name = serializers.SerializerMethodField()

    class Meta:
        model = BloodRequest
        fields = [
            'id',
            'requester',
            'requester_name',
            'blood_type',
            'units_needed',
            'urgency',
            'hospital_name',
            'hospital_address',
            'city',
            'latitude',
            'longitude',
            'contact_name',
            'contact_phone',
            'needed_by',
            'description',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['requester', 'status', 'created_at', 'updated_at']

    def get_requester_name(self, obj):
        return obj.requester.get_full_name() or obj.requester.username

    def validate(self, attrs):
        latitude, longitude = attrs.get('latitude'), attrs.get('longitude')
        if (latitude is None) != (longitude is None):
            raise serializers.ValidationError("Latitude and longitude must be given together")
        return attrs


class CancelRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


# ---------------------------
# Match results
# ---------------------------
class DonorMatchSerializer(serializers.Serializer):
    """Serializes one {'donor', 'distance_km'} entry from find_donors"""
    user_id = serializers.IntegerField(source='donor.user_id')
    name = serializers.CharField(source='donor.full_name')
    email = serializers.EmailField(source='donor.user.email')
    phone = serializers.CharField(source='donor.user.phone')
    blood_type = serializers.CharField(source='donor.blood_type')
    city = serializers.CharField(source='donor.city')
    distance_km = serializers.FloatField(allow_null=True)
    last_donation_date = serializers.DateField(source='donor.last_donation_date', allow_null=True)


class RequestMatchSerializer(serializers.Serializer):
    """Serializes one {'request', 'distance_km'} entry from find_requests"""
    request_id = serializers.IntegerField(source='request.id')
    blood_type = serializers.CharField(source='request.blood_type')
    units_needed = serializers.IntegerField(source='request.units_needed')
    urgency = serializers.CharField(source='request.urgency')
    hospital_name = serializers.CharField(source='request.hospital_name')
    hospital_address = serializers.CharField(source='request.hospital_address')
    city = serializers.CharField(source='request.city')
    distance_km = serializers.FloatField(allow_null=True)
    contact_name = serializers.CharField(source='request.contact_name')
    contact_phone = serializers.CharField(source='request.contact_phone')
    needed_by = serializers.DateField(source='request.needed_by')
    description = serializers.CharField(source='request.description')
    created_at = serializers.DateTimeField(source='request.created_at')


# ---------------------------
# Donations
# ---------------------------
class DonationSerializer(serializers.ModelSerializer):
    donor_name = serializers.CharField(source='donor.full_name', read_only=True)
    donor_email = serializers.EmailField(source='donor.user.email', read_only=True)
    donor_phone = serializers.CharField(source='donor.user.phone', read_only=True)
    donor_blood_type = serializers.CharField(source='donor.blood_type', read_only=True)
    request_blood_type = serializers.CharField(source='blood_request.blood_type', read_only=True)
    hospital_name = serializers.CharField(source='blood_request.hospital_name', read_only=True)
    urgency = serializers.CharField(source='blood_request.urgency', read_only=True)

    class Meta:
        model = Donation
        fields = [
            'id',
            'blood_request',
            'request_blood_type',
            'hospital_name',
            'urgency',
            'donor',
            'donor_name',
            'donor_email',
            'donor_phone',
            'donor_blood_type',
            'units',
            'status',
            'donation_date',
            'notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ExpressInterestSerializer(serializers.Serializer):
    units = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True)


class DonationStatusSerializer(serializers.Serializer):
    # Unknown values reach the lifecycle, which reports them as InvalidStatus
    status = serializers.CharField()
    donation_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


# ---------------------------
# Donor health & availability
# ---------------------------
class HealthInfoSerializer(serializers.Serializer):
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    weight_kg = serializers.FloatField(required=False, allow_null=True, min_value=0)
    health_conditions = serializers.ListField(
        child=serializers.CharField(max_length=200),
        required=False,
        allow_empty=True,
    )

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No fields to update")
        return attrs


class AvailabilitySerializer(serializers.Serializer):
    is_available = serializers.BooleanField()


class DonorHealthSerializer(serializers.ModelSerializer):
    class Meta:
        model = DonorProfile
        fields = [
            'id',
            'full_name',
            'blood_type',
            'is_available',
            'last_donation_date',
            'date_of_birth',
            'weight_kg',
            'health_conditions',
        ]
        read_only_fields = fields
