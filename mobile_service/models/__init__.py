# Mobile service scheduler: Database Models
# Import all models here for SQLAlchemy discovery

from mobile_service.models.technician import Technician                      # noqa
from mobile_service.models.manager import Manager                            # noqa
from mobile_service.models.recurring_schedule import RecurringScheduleEntry  # noqa
from mobile_service.models.date_override import DateOverrideEntry            # noqa
from mobile_service.models.customer import Customer                          # noqa
from mobile_service.models.appointment import Appointment                    # noqa
from mobile_service.models.job_counter import JobCounter                     # noqa
from mobile_service.models.time_entry import TimeEntry                       # noqa
