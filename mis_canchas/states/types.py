from typing import TypedDict


class CurrentUser(TypedDict):
    id: int | None
    email: str
    name: str
    role: str
    establishment_id: int | None


class CashRegisterInfo(TypedDict):
    id: int
    establishment_id: int
    status: str
    opened_at: str
    closed_at: str
    initial_cash: float
    expected_cash: float
    actual_cash: float
    cash_difference: float
    reconciliation: str
    total_cash: float
    total_card: float
    total_transfer: float
    total_credit_card: float
    total_debit_card: float
    total_mercadopago: float
    total_other: float
    total_sales: float
    total_expenses: float
    total_orders: int
    total_movements: int


class BookingInfo(TypedDict):
    id: int
    facility_name: str
    court_name: str
    court_id: int
    establishment_id: int
    sport: str
    date: str
    start_time: str
    end_time: str
    duration: int
    price: float
    status: str
    payment_status: str
    check_in_code: str
    cancellation_reason: str


class BookingStats(TypedDict):
    total_bookings: int
    upcoming_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    total_spent: float
    favorite_sport: str
    hours_played: float


class NotificationInfo(TypedDict):
    id: int
    type: str
    title: str
    message: str
    is_read: bool
    created_at: str
