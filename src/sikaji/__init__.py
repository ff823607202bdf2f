"""Si-Kaji student-affairs backend.

Feature packages (attendance, locations, schedules, permits, ...) each carry a
domain model, a repository interface with its MySQL implementation, a service
layer and a thin Flask controller.
"""

__version__ = "1.0.0"
