from .recurrence import adjust_to_schedule_time, previous_scheduled_run, is_due
from .service import ScheduledImportService, ScheduledImportResult
