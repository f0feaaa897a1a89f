"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_NOTE = 20

# Four late arrivals convert into one chargeable absence hour.
LATES_PER_HOUR = 4

# Standard note: 0.5 point per full 2.5 hour block, 1 point per 4 lates.
ABSENCE_BLOCK_HOURS = 2.5
ABSENCE_BLOCK_DEDUCTION = 0.5
LATE_BLOCK_SIZE = 4
LATE_BLOCK_DEDUCTION = 1

# Points note (trainee list surface): 1 point per 5 hours.
POINTS_ABSENCE_DIVISOR = 5

# Hours charged to a late event when stored.
LATE_EVENT_HOURS = 1

WEEKDAY_LABELS = ("LUN", "MAR", "MERC", "JEU", "VEN", "SAM")

DEFAULT_HISTORY_LIMIT = 200
