# api/views.py
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.decorators import donor_required
from algorithms.blood_compatibility import compatible_donors_for, compatible_recipients_for
from algorithms.eligibility import classify_conditions, format_eligibility_message
from algorithms.exceptions import RequestNotFound
from algorithms.matching import DONOR_ROLES, find_donors, find_requests
from bloodrequests.filters import BloodRequestFilter
from bloodrequests.models import BloodRequest
from bloodrequests.services import cancel_request
from donations import services as lifecycle
from donations.filters import DonationFilter
from donors.models import DonorProfile
from donors.services import update_health_info

from .serializers import (
    AvailabilitySerializer,
    BloodRequestSerializer,
    CancelRequestSerializer,
    DonationSerializer,
    DonationStatusSerializer,
    DonorHealthSerializer,
    DonorMatchSerializer,
    ExpressInterestSerializer,
    HealthInfoSerializer,
    MatchQuerySerializer,
    RequestMatchSerializer,
)


def _match_params(request):
    params = MatchQuerySerializer(data=request.query_params)
    params.is_valid(raise_exception=True)
    return params.validated_data


# ============================================
# BLOOD REQUESTS
# ============================================
class BloodRequestViewSet(mixins.CreateModelMixin,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          viewsets.GenericViewSet):
    """
    Create, browse and cancel blood requests.
    Browsing is public; the list defaults to requests still accepting donations.
    """
    queryset = BloodRequest.objects.select_related('requester').order_by('-created_at')
    serializer_class = BloodRequestSerializer
    filterset_class = BloodRequestFilter

    def get_permissions(self):
        if self.action in ('list', 'retrieve'):
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list' and 'status' not in self.request.query_params:
            queryset = queryset.filter(status__in=BloodRequest.ACCEPTING_STATUSES)
        return queryset

    def perform_create(self, serializer):
        serializer.save(requester=self.request.user, status='open')

    @action(detail=False, methods=['get'])
    def mine(self, request):
        queryset = self.filter_queryset(
            BloodRequest.objects.filter(requester=request.user).order_by('-created_at')
        )
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel a request (owner or admin); pending donations are cancelled with it"""
        body = CancelRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        blood_request, cancelled = cancel_request(request.user, pk, body.validated_data.get('reason'))
        return Response({
            'message': 'Request cancelled successfully',
            'cancelled_donations': cancelled,
            'request': self.get_serializer(blood_request).data,
        })


# ============================================
# MATCHING
# ============================================
@api_view(['GET'])
@permission_classes([AllowAny])
def find_matching_donors(request, request_id):
    """Ranked donors for one open request"""
    params = _match_params(request)

    blood_request = BloodRequest.objects.filter(pk=request_id).first()
    if blood_request is None:
        raise RequestNotFound()

    pool = DonorProfile.objects.select_related('user').filter(
        is_available=True,
        user__is_active=True,
        user__role__in=DONOR_ROLES,
        blood_type__in=compatible_donors_for(blood_request.blood_type),
    )
    result = find_donors(blood_request, pool, params['max_distance'], params['limit'])

    return Response({
        'request': {
            'request_id': blood_request.pk,
            'blood_type': blood_request.blood_type,
            'units_needed': blood_request.units_needed,
            'urgency': blood_request.urgency,
            'hospital_name': blood_request.hospital_name,
            'city': blood_request.city,
        },
        'compatible_blood_types': result['compatible_blood_types'],
        'total_matches': result['total_matches'],
        'donors': DonorMatchSerializer(result['donors'], many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
@donor_required
def find_requests_for_donor(request):
    """Open requests the caller can donate to, most urgent and nearest first"""
    params = _match_params(request)
    donor = lifecycle.donor_profile_for(request.user)

    pool = BloodRequest.objects.filter(
        status='open',
        blood_type__in=compatible_recipients_for(donor.blood_type),
        needed_by__gte=timezone.localdate(),
    )
    result = find_requests(
        donor,
        pool,
        max_distance_km=params['max_distance'],
        urgency=params.get('urgency'),
        limit=params['limit'],
        today=timezone.localdate(),
    )

    return Response({
        'donor_blood_type': result['donor_blood_type'],
        'can_donate_to': result['can_donate_to'],
        'total_matches': result['total_matches'],
        'requests': RequestMatchSerializer(result['requests'], many=True).data,
    })


# ============================================
# DONATIONS
# ============================================
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def express_donation_interest(request, request_id):
    body = ExpressInterestSerializer(data=request.data)
    body.is_valid(raise_exception=True)

    donation = lifecycle.express_interest(
        request.user,
        request_id,
        units=body.validated_data['units'],
        notes=body.validated_data.get('notes'),
        now=timezone.localdate(),
    )
    return Response({
        'message': 'Donation interest recorded successfully',
        'donation': DonationSerializer(donation).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def donations_for_request(request, request_id):
    blood_request, donations = lifecycle.donations_for_request(request.user, request_id)
    return Response({
        'request_id': blood_request.pk,
        'total_donations': len(donations),
        'donations': DonationSerializer(donations, many=True).data,
    })


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def update_donation_status(request, donation_id):
    body = DonationStatusSerializer(data=request.data)
    body.is_valid(raise_exception=True)

    donation = lifecycle.set_status(
        request.user,
        donation_id,
        body.validated_data['status'],
        donation_date=body.validated_data.get('donation_date'),
        notes=body.validated_data.get('notes'),
    )
    return Response({
        'message': 'Donation status updated successfully',
        'donation': DonationSerializer(donation).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
@donor_required
def my_donations(request):
    filterset = DonationFilter(request.query_params, queryset=lifecycle.donations_for_donor(request.user))
    if not filterset.is_valid():
        return Response({'error': filterset.errors}, status=status.HTTP_400_BAD_REQUEST)

    donations = filterset.qs
    return Response({
        'total': donations.count(),
        'donations': DonationSerializer(donations, many=True).data,
    })


# ============================================
# DONOR ELIGIBILITY & PROFILE
# ============================================
@api_view(['GET'])
@permission_classes([IsAuthenticated])
@donor_required
def check_eligibility(request):
    donor = lifecycle.donor_profile_for(request.user)
    eligibility = donor.eligibility(timezone.localdate())

    return Response({
        'donor': {
            'id': donor.pk,
            'name': donor.full_name,
            'blood_type': donor.blood_type,
            'is_available': donor.is_available,
        },
        'eligibility': eligibility.to_dict(),
        'donation_history': lifecycle.donation_history_summary(donor),
        'message': format_eligibility_message(eligibility),
    })


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
@donor_required
def update_health(request):
    body = HealthInfoSerializer(data=request.data)
    body.is_valid(raise_exception=True)

    donor = lifecycle.donor_profile_for(request.user)
    eligibility = update_health_info(donor, body.validated_data)

    return Response({
        'message': 'Health information updated successfully',
        'donor': DonorHealthSerializer(donor).data,
        'eligibility': eligibility.to_dict(),
        'screening': classify_conditions(donor.health_conditions),
    })


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
@donor_required
def update_availability(request):
    body = AvailabilitySerializer(data=request.data)
    body.is_valid(raise_exception=True)

    donor = lifecycle.donor_profile_for(request.user)
    donor.is_available = body.validated_data['is_available']
    donor.save(update_fields=['is_available', 'updated_at'])
    return Response({'is_available': donor.is_available})
