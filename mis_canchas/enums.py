from enum import Enum

class CashRegisterStatus(str, Enum):
    open = "open"
    closed = "closed"

    OPEN = open
    CLOSED = closed

class CashMovementType(str, Enum):
    sale = "sale"
    expense = "expense"

    SALE = sale
    EXPENSE = expense

class PaymentMethodType(str, Enum):
    cash = "cash"
    card = "card"
    transfer = "transfer"
    credit_card = "credit_card"
    debit_card = "debit_card"
    mercadopago = "mercadopago"
    other = "other"

    CASH = cash
    CARD = card
    TRANSFER = transfer
    CREDIT_CARD = credit_card
    DEBIT_CARD = debit_card
    MERCADOPAGO = mercadopago
    OTHER = other

class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"

    PENDING = pending
    CONFIRMED = confirmed
    IN_PROGRESS = in_progress
    COMPLETED = completed
    CANCELLED = cancelled
    NO_SHOW = no_show

class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"

    PENDING = pending
    PAID = paid
    FAILED = failed
    REFUNDED = refunded

class ReconciliationStatus(str, Enum):
    balanced = "balanced"
    surplus = "surplus"
    shortage = "shortage"

    BALANCED = balanced
    SURPLUS = surplus
    SHORTAGE = shortage

class UserRole(str, Enum):
    player = "player"
    staff = "staff"
    admin = "admin"

    PLAYER = player
    STAFF = staff
    ADMIN = admin

class NotificationType(str, Enum):
    booking_confirmed = "booking_confirmed"
    booking_cancelled = "booking_cancelled"
    payment_received = "payment_received"
    payment_failed = "payment_failed"
    cash_register_closed = "cash_register_closed"
    system_announcement = "system_announcement"

    BOOKING_CONFIRMED = booking_confirmed
    BOOKING_CANCELLED = booking_cancelled
    PAYMENT_RECEIVED = payment_received
    PAYMENT_FAILED = payment_failed
    CASH_REGISTER_CLOSED = cash_register_closed
    SYSTEM_ANNOUNCEMENT = system_announcement
