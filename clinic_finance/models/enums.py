"""Enumeration types for clinic finance entities.

Values match the strings exchanged with the clinic REST API.
"""

from enum import Enum


class PaymentFrequency(str, Enum):
    WEEKLY = "Semanal"
    BIWEEKLY = "Quincenal"
    MONTHLY = "Mensual"


class InstallmentStatus(str, Enum):
    PENDING = "Pendiente"
    PARTIAL = "Parcial"
    PAID = "Pagado"
    OVERDUE = "Vencido"  # view-derived only, never stored


class ApprovalStatus(str, Enum):
    PENDING = "Por_Aprobar"
    APPROVED = "Aprobado"
    REJECTED = "Rechazado"


class PlanStatus(str, Enum):
    PENDING = "Pendiente"
    ACTIVE = "Activo"
    COMPLETED = "Completado"
    CANCELLED = "Cancelado"


class PaymentMethod(str, Enum):
    CASH = "Efectivo"
    CREDIT_CARD = "Tarjeta de Crédito"
    DEBIT_CARD = "Tarjeta de Débito"
    TRANSFER = "Transferencia"


class CashSessionStatus(str, Enum):
    OPEN = "ABIERTA"
    CLOSED = "CERRADA"


class MovementType(str, Enum):
    INCOME = "INGRESO"
    EXPENSE = "EGRESO"


class BudgetStatus(str, Enum):
    DRAFT = "Borrador"
    SENT = "Enviado"
    APPROVED = "Aprobado"
    REJECTED = "Rechazado"
    EXPIRED = "Vencido"


class RateConvention(str, Enum):
    """How an annual interest rate becomes a periodic rate."""

    MONTHLY = "monthly"  # annual / 12 whatever the frequency
    PER_PERIOD = "per_period"  # annual / periods per year of the frequency
