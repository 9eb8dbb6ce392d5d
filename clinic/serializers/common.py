"""Field types shared by the API serializers."""
from decimal import Decimal

import bleach
from rest_framework import serializers

from clinic.models import CIGARETTE_TYPE_CHOICES

MIN_AMOUNT = Decimal('0.01')


class CleanCharField(serializers.CharField):
    """CharField that strips markup from user-supplied text."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return bleach.clean(value, tags=[], strip=True)


def money(source=None, **kwargs):
    if source:
        kwargs['source'] = source
    return serializers.DecimalField(max_digits=12, decimal_places=2, **kwargs)


def amount_field(**kwargs):
    return money(min_value=MIN_AMOUNT, **kwargs)


class CigaretteAllowanceSerializer(serializers.Serializer):
    """``dailyCigaretteType`` / ``dailyCigaretteCost`` pair shared by patients, staff and graduates."""
    dailyCigaretteType = serializers.ChoiceField(
        source='daily_cigarette_type', choices=CIGARETTE_TYPE_CHOICES, required=False)
    dailyCigaretteCost = money('daily_cigarette_cost', min_value=Decimal('0'), required=False, allow_null=True)
