import enum


class UserRole(str, enum.Enum):
    SUPERUSER = "SUPERUSER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    CASHIER = "CASHIER"
    CHEF = "CHEF"
    WAITER = "WAITER"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    SERVED = "SERVED"
    PAID = "PAID"
    VOID = "VOID"


class OrderItemStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"


class PaymentStatus(str, enum.Enum):
    PAID = "PAID"
    VOID = "VOID"


class PaymentType(str, enum.Enum):
    CASH = "CASH"
    QRIS = "QRIS"
    BANK_TRANSFER = "BANK_TRANSFER"
    KASBON = "KASBON"
    GRABFOOD = "GRABFOOD"
    SHOPEEFOOD = "SHOPEEFOOD"
    GOFOOD = "GOFOOD"
    FOC = "FOC"  # free of charge


class StockLogType(str, enum.Enum):
    INBOUND = "INBOUND"
    DISCREPANCY = "DISCREPANCY"
    OUTBOUND_NM = "OUTBOUND_NM"
    OUTBOUND_BOSS = "OUTBOUND_BOSS"
    OUTBOUND_STAFF = "OUTBOUND_STAFF"
    TRANSFER_NAGOYA = "TRANSFER_NAGOYA"
    TRANSFER_SERAYA = "TRANSFER_SERAYA"
    TRANSFER_BENGKONG = "TRANSFER_BENGKONG"
    TRANSFER_MALALAYANG = "TRANSFER_MALALAYANG"
    TRANSFER_KLEAK = "TRANSFER_KLEAK"
    TRANSFER_PANIKI = "TRANSFER_PANIKI"
    TRANSFER_ITC = "TRANSFER_ITC"
    VOID = "VOID"


# Manual movements that take stock out of an outlet
DEDUCTION_LOG_TYPES = (
    StockLogType.DISCREPANCY,
    StockLogType.TRANSFER_NAGOYA,
    StockLogType.TRANSFER_SERAYA,
    StockLogType.TRANSFER_BENGKONG,
    StockLogType.TRANSFER_MALALAYANG,
    StockLogType.TRANSFER_KLEAK,
    StockLogType.TRANSFER_PANIKI,
    StockLogType.TRANSFER_ITC,
)

MANUAL_LOG_TYPES = (StockLogType.INBOUND,) + DEDUCTION_LOG_TYPES
