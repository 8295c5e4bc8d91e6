# import every model so Base.metadata and the mappers see all tables
from cottagetrip.db.session import Base  # noqa: F401
from cottagetrip.models.room import Room  # noqa: F401
from cottagetrip.models.room_member import RoomMember  # noqa: F401
from cottagetrip.models.expense import Expense  # noqa: F401
from cottagetrip.models.expense_split import ExpenseSplit  # noqa: F401
from cottagetrip.models.rental_payment import RentalPayment  # noqa: F401
from cottagetrip.models.payment_reminder import PaymentReminder  # noqa: F401
