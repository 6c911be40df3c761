"""
Attendance Domain

Attendance collections are created by converting a date schedule. They get
their own target dates, group assignments and responses; nothing points
back at the schedule's candidates once the conversion has committed.
"""
