# cr_core/rates/models.py
from __future__ import annotations

from django.db import models

from cr_core.campgrounds.models import Site, SiteClass
from cr_core.common.models import ScopedModel


class RateEntry(ScopedModel):
    """
    Nightly rate for a site or a site class over an inclusive date span.

    Exactly one of site / site_class is set. Once a booking prices a night
    from this entry, locked_at is stamped and the entry becomes immutable.
    """
    site = models.ForeignKey(Site, on_delete=models.PROTECT, related_name="rate_entries", null=True, blank=True)
    site_class = models.ForeignKey(
        SiteClass, on_delete=models.PROTECT, related_name="rate_entries", null=True, blank=True
    )

    start_date = models.DateField(db_index=True)
    end_date = models.DateField(db_index=True)  # inclusive
    nightly_rate_cents = models.PositiveIntegerField()

    label = models.CharField(max_length=128, blank=True, default="")
    locked_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "rates_rate_entry"
        indexes = [
            models.Index(fields=["campground_id", "site"]),
            models.Index(fields=["campground_id", "site_class"]),
            models.Index(fields=["campground_id", "start_date", "end_date"]),
        ]

    @property
    def is_locked(self) -> bool:
        return self.locked_at is not None

    def covers(self, night) -> bool:
        return self.start_date <= night <= self.end_date

    def __str__(self) -> str:
        target = f"site={self.site_id}" if self.site_id else f"class={self.site_class_id}"
        return f"{target} {self.start_date}..{self.end_date} @{self.nightly_rate_cents}"
