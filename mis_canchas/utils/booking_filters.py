"""
Vista derivada de reservas: filtros, orden y estadisticas.

Funciones puras sobre los diccionarios que guardan los estados; no son
fuente de verdad, solo reordenan lo que devolvio el servidor.
"""
from __future__ import annotations

import datetime
from collections import Counter
from typing import Any, Dict, Iterable, List

from mis_canchas.utils.dates import parse_date
from mis_canchas.utils.formatting import round_currency

UPCOMING_STATUSES = {"pending", "confirmed"}


def _booking_date(booking: Dict[str, Any]) -> datetime.date | None:
    return parse_date(str(booking.get("date") or ""))


def _date_sort_key(booking: Dict[str, Any]) -> str:
    return f"{booking.get('date') or ''} {booking.get('start_time') or ''}"


def filter_bookings(
    bookings: Iterable[Dict[str, Any]],
    status: str = "all",
    sport: str = "",
    start_date: str = "",
    end_date: str = "",
    today: datetime.date | None = None,
) -> List[Dict[str, Any]]:
    today = today or datetime.date.today()
    status = (status or "all").strip().lower()
    start = parse_date(start_date)
    end = parse_date(end_date)
    result: List[Dict[str, Any]] = []
    for booking in bookings:
        booking_status = booking.get("status", "")
        if status == "upcoming":
            booking_day = _booking_date(booking)
            if booking_status not in UPCOMING_STATUSES or booking_day is None or booking_day < today:
                continue
        elif status != "all" and booking_status != status:
            continue
        if sport and booking.get("sport") != sport:
            continue
        if start or end:
            booking_day = _booking_date(booking)
            if booking_day is None:
                continue
            if start and booking_day < start:
                continue
            if end and booking_day > end:
                continue
        result.append(booking)
    return result


def sort_bookings(
    bookings: Iterable[Dict[str, Any]],
    sort_by: str = "date",
    sort_order: str = "desc",
) -> List[Dict[str, Any]]:
    reverse = (sort_order or "desc").lower() != "asc"
    if sort_by == "price":
        key = lambda b: float(b.get("price") or 0)
    elif sort_by == "facility":
        key = lambda b: str(b.get("facility_name") or "").casefold()
    elif sort_by == "date":
        key = _date_sort_key
    else:
        return list(bookings)
    return sorted(bookings, key=key, reverse=reverse)


def booking_stats(
    bookings: Iterable[Dict[str, Any]],
    today: datetime.date | None = None,
) -> Dict[str, Any]:
    today = today or datetime.date.today()
    bookings = list(bookings)
    completed = [b for b in bookings if b.get("status") == "completed"]
    sports = Counter(b.get("sport") for b in bookings if b.get("sport"))
    upcoming = 0
    for booking in bookings:
        booking_day = _booking_date(booking)
        if booking.get("status") == "confirmed" and booking_day and booking_day > today:
            upcoming += 1
    minutes_played = sum(int(b.get("duration") or 0) for b in completed)
    return {
        "total_bookings": len(bookings),
        "upcoming_bookings": upcoming,
        "completed_bookings": len(completed),
        "cancelled_bookings": sum(1 for b in bookings if b.get("status") == "cancelled"),
        "total_spent": round_currency(
            sum(float(b.get("price") or 0) for b in bookings if b.get("payment_status") == "paid")
        ),
        "favorite_sport": sports.most_common(1)[0][0] if sports else "",
        "hours_played": round(minutes_played / 60, 2),
    }
