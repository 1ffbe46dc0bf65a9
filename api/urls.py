# api/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register(r'requests', views.BloodRequestViewSet, basename='blood-request')

app_name = 'api'

urlpatterns = [
    path('', include(router.urls)),

    # Matching
    path('match/request/<int:request_id>/donors/', views.find_matching_donors, name='match-donors'),
    path('match/donor/requests/', views.find_requests_for_donor, name='match-requests'),

    # Donation lifecycle
    path('match/donate/<int:request_id>/', views.express_donation_interest, name='express-interest'),
    path('match/request/<int:request_id>/donations/', views.donations_for_request, name='request-donations'),
    path('match/donation/<int:donation_id>/status/', views.update_donation_status, name='donation-status'),
    path('match/donor/donations/', views.my_donations, name='my-donations'),

    # Donor self-service
    path('match/donor/eligibility/', views.check_eligibility, name='check-eligibility'),
    path('match/donor/health/', views.update_health, name='update-health'),
    path('match/donor/availability/', views.update_availability, name='update-availability'),
]

# Available endpoints:
# GET   /api/requests/                              - Open and partially fulfilled requests
# POST  /api/requests/                              - Create a request
# GET   /api/requests/mine/                         - Caller's own requests
# GET   /api/requests/{id}/                         - One request
# POST  /api/requests/{id}/cancel/                  - Cancel (owner or admin)
#
# GET   /api/match/request/{id}/donors/             - Ranked donors for a request
# GET   /api/match/donor/requests/                  - Ranked requests for the caller
# POST  /api/match/donate/{id}/                     - Offer to donate
# GET   /api/match/request/{id}/donations/          - Offers on a request (owner)
# PATCH /api/match/donation/{id}/status/            - Move an offer through its lifecycle
# GET   /api/match/donor/donations/                 - Caller's offers
# GET   /api/match/donor/eligibility/               - Eligibility breakdown
# PATCH /api/match/donor/health/                    - Update health screening data
# PATCH /api/match/donor/availability/              - Toggle availability
