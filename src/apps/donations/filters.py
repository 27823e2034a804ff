from __future__ import annotations

import django_filters

from apps.donations.models import Donation


class DonationFilter(django_filters.FilterSet):
    projectId = django_filters.UUIDFilter(field_name="project_id")
    paymentGateway = django_filters.CharFilter(field_name="payment_gateway", lookup_expr="iexact")
    minAmount = django_filters.NumberFilter(field_name="amount", lookup_expr="gte")
    maxAmount = django_filters.NumberFilter(field_name="amount", lookup_expr="lte")

    class Meta:
        model = Donation
        fields = []
