"""FilterSet definitions for booking listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """status, and a window: from_date <= start_time, end_time <= to_date."""

    status = django_filters.ChoiceFilter(field_name="booking_status", choices=Booking.Status.choices)
    from_date = django_filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="gte")
    to_date = django_filters.IsoDateTimeFilter(field_name="end_time", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["status", "from_date", "to_date"]

    def is_valid(self):  # type: ignore
        if not super().is_valid():
            return False
        from_date = self.form.cleaned_data.get("from_date")
        to_date = self.form.cleaned_data.get("to_date")
        if from_date and to_date and from_date > to_date:
            self.form.add_error("from_date", "from_date cannot be after to_date")
            return False
        return True
