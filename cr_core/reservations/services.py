# cr_core/reservations/services.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable
from uuid import UUID

from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from cr_core.audit.services import AuditService
from cr_core.campgrounds.models import Site
from cr_core.campgrounds.policies import CancellationPolicy
from cr_core.campgrounds.selectors import campground_by_id
from cr_core.common.api.exceptions import ConflictError
from cr_core.quotes.services import QuoteService
from cr_core.rates.resolver import stay_nights
from cr_core.rates.services import RateEntryService
from cr_core.reservations.cancellation import CancellationOutcome, CancellationSnapshot, evaluate_cancellation
from cr_core.reservations.models import Reservation, ReservationStatus
from cr_core.reservations.selectors import overlapping_reservations, reservation_by_id

logger = logging.getLogger(__name__)

# from-status -> to-status
TRANSITIONS = {
    ReservationStatus.CONFIRMED: (ReservationStatus.PENDING,),
    ReservationStatus.CHECKED_IN: (ReservationStatus.CONFIRMED,),
    ReservationStatus.CHECKED_OUT: (ReservationStatus.CHECKED_IN,),
}


class ReservationService:
    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    @staticmethod
    def _locked(*, campground_id: UUID, reservation_id: UUID) -> Reservation:
        return get_object_or_404(
            Reservation.objects.select_for_update(),
            id=reservation_id,
            campground_id=campground_id,
        )

    @staticmethod
    def _policy_for(reservation: Reservation) -> CancellationPolicy:
        if reservation.cancellation_policy_snapshot:
            return CancellationPolicy.from_snapshot(reservation.cancellation_policy_snapshot)
        # bookings made before snapshots existed fall back to the live policy
        return CancellationPolicy.from_campground(campground_by_id(campground_id=reservation.campground_id))

    @staticmethod
    def _transition(
        *,
        campground_id: UUID,
        reservation_id: UUID,
        to_status: str,
        event_code: str,
        actor_user_id: int | None,
    ) -> Reservation:
        res = ReservationService._locked(campground_id=campground_id, reservation_id=reservation_id)

        allowed_from = TRANSITIONS[to_status]
        if res.status not in allowed_from:
            raise ConflictError(
                f"Cannot move reservation from '{res.status}' to '{to_status}'.",
                status=str(res.status),
                target_status=str(to_status),
            )

        from_status = res.status
        res.status = to_status
        res.save(update_fields=["status", "updated_at"])

        AuditService.log(
            event_code=event_code,
            entity_type="Reservation",
            entity_id=res.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata={"from": str(from_status), "to": str(to_status)},
        )
        return res

    # ---------------------------------------------------------------------
    # Booking
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def create(
        *,
        campground_id: UUID,
        site_id: UUID,
        guest_name: str,
        arrival: date,
        departure: date,
        guest_email: str = "",
        adults: int = 1,
        children: int = 0,
        pets: int = 0,
        upsells: Iterable[dict] | None = None,
        demand_score: int = 0,
        actor_user_id: int | None = None,
    ) -> Reservation:
        """
        Books a site for [arrival, departure).

        The site row lock serialises concurrent bookings of the same site, so
        the overlap check and the insert cannot interleave.
        """
        stay_nights(arrival, departure)

        site = Site.objects.select_for_update().filter(campground_id=campground_id, id=site_id).first()
        if site is None:
            raise NotFound("Site not found in this campground.")
        if not site.is_active:
            raise ValidationError({"site": "Site is not bookable."})

        clashes = list(
            overlapping_reservations(
                campground_id=campground_id,
                arrival=arrival,
                departure=departure,
                site_id=site.id,
            ).values_list("id", flat=True)
        )
        if clashes:
            raise ConflictError(
                "Site is already booked for some of these nights.",
                conflicting_reservation_ids=[str(x) for x in clashes],
            )

        quote = QuoteService.build_quote(
            campground_id=campground_id,
            arrival=arrival,
            departure=departure,
            site_id=site.id,
            adults=adults,
            children=children,
            pets=pets,
            upsells=upsells,
            demand_score=demand_score,
        )
        policy = CancellationPolicy.from_campground(campground_by_id(campground_id=campground_id))
        quote_data = quote.as_dict()

        try:
            with transaction.atomic():
                res = Reservation.objects.create(
                    campground_id=campground_id,
                    site=site,
                    guest_name=guest_name,
                    guest_email=guest_email or "",
                    arrival_date=arrival,
                    departure_date=departure,
                    adults=adults,
                    children=children,
                    pets=pets,
                    status=ReservationStatus.PENDING,
                    base_total_cents=quote.base_total_cents,
                    adjustments_cents=quote.adjustments_cents,
                    fees_cents=quote.fees_cents,
                    tax_cents=quote.tax_cents,
                    total_cents=quote.total_cents,
                    deposit_cents=quote.deposit_cents,
                    nightly_rates=quote_data["nightly_rates"],
                    first_night_rate_cents=quote.first_night_cents,
                    applied_rules=quote_data["applied_rules"],
                    charge_lines=quote_data["lines"],
                    cancellation_policy_snapshot=policy.to_snapshot(),
                    created_by_user_id=actor_user_id,
                )
        except IntegrityError:
            logger.warning(
                "Reservation insert for site=%s %s..%s hit the active-stay constraint", site.id, arrival, departure
            )
            raise ConflictError("Site is already booked for some of these nights.", site_id=str(site.id))

        RateEntryService.lock_entries(campground_id=campground_id, rate_entry_ids=quote.rate_entry_ids)

        AuditService.log(
            event_code="reservation.created",
            entity_type="Reservation",
            entity_id=res.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata={
                "site_id": site.id,
                "arrival_date": arrival,
                "departure_date": departure,
                "total_cents": res.total_cents,
                "deposit_cents": res.deposit_cents,
            },
        )
        logger.info(
            "Reservation %s booked site=%s %s..%s total=%s",
            res.id,
            site.code,
            arrival,
            departure,
            res.total_cents,
        )
        return res

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def confirm(*, campground_id: UUID, reservation_id: UUID, actor_user_id: int | None = None) -> Reservation:
        return ReservationService._transition(
            campground_id=campground_id,
            reservation_id=reservation_id,
            to_status=ReservationStatus.CONFIRMED,
            event_code="reservation.confirmed",
            actor_user_id=actor_user_id,
        )

    @staticmethod
    @transaction.atomic
    def check_in(*, campground_id: UUID, reservation_id: UUID, actor_user_id: int | None = None) -> Reservation:
        return ReservationService._transition(
            campground_id=campground_id,
            reservation_id=reservation_id,
            to_status=ReservationStatus.CHECKED_IN,
            event_code="reservation.checked_in",
            actor_user_id=actor_user_id,
        )

    @staticmethod
    @transaction.atomic
    def check_out(*, campground_id: UUID, reservation_id: UUID, actor_user_id: int | None = None) -> Reservation:
        return ReservationService._transition(
            campground_id=campground_id,
            reservation_id=reservation_id,
            to_status=ReservationStatus.CHECKED_OUT,
            event_code="reservation.checked_out",
            actor_user_id=actor_user_id,
        )

    @staticmethod
    @transaction.atomic
    def record_payment(
        *,
        campground_id: UUID,
        reservation_id: UUID,
        amount_cents: int,
        actor_user_id: int | None = None,
    ) -> Reservation:
        if int(amount_cents) <= 0:
            raise ValidationError({"amount_cents": "Must be > 0."})

        res = ReservationService._locked(campground_id=campground_id, reservation_id=reservation_id)
        if res.status == ReservationStatus.CANCELLED:
            raise ConflictError("Cannot take payment on a cancelled reservation.", status=str(res.status))

        before = res.paid_amount_cents
        res.paid_amount_cents = min(res.total_cents, before + int(amount_cents))
        res.save(update_fields=["paid_amount_cents", "updated_at"])

        AuditService.log(
            event_code="reservation.payment_recorded",
            entity_type="Reservation",
            entity_id=res.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata={
                "amount_cents": int(amount_cents),
                "applied_cents": res.paid_amount_cents - before,
                "paid_amount_cents": res.paid_amount_cents,
            },
        )
        return res

    # ---------------------------------------------------------------------
    # Cancellation
    # ---------------------------------------------------------------------
    @staticmethod
    def preview_cancellation(
        *,
        campground_id: UUID,
        reservation_id: UUID,
        now: datetime | None = None,
    ) -> CancellationOutcome:
        res = reservation_by_id(campground_id=campground_id, reservation_id=reservation_id)
        return evaluate_cancellation(
            snapshot=CancellationSnapshot.from_reservation(res),
            policy=ReservationService._policy_for(res),
            now=now or timezone.now(),
        )

    @staticmethod
    @transaction.atomic
    def cancel(
        *,
        campground_id: UUID,
        reservation_id: UUID,
        now: datetime | None = None,
        actor_user_id: int | None = None,
    ) -> tuple[Reservation, CancellationOutcome]:
        res = ReservationService._locked(campground_id=campground_id, reservation_id=reservation_id)

        outcome = evaluate_cancellation(
            snapshot=CancellationSnapshot.from_reservation(res),
            policy=ReservationService._policy_for(res),
            now=now or timezone.now(),
        )

        res.status = ReservationStatus.CANCELLED
        res.cancelled_at = outcome.evaluated_at
        res.cancellation_fee_cents = outcome.fee_cents
        res.refund_cents = outcome.refund_cents
        res.save(update_fields=["status", "cancelled_at", "cancellation_fee_cents", "refund_cents", "updated_at"])

        AuditService.log(
            event_code="reservation.cancelled",
            entity_type="Reservation",
            entity_id=res.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata=outcome.as_dict(),
        )
        logger.info(
            "Reservation %s cancelled fee=%s refund=%s free_window=%s",
            res.id,
            outcome.fee_cents,
            outcome.refund_cents,
            outcome.within_free_window,
        )
        return res, outcome
