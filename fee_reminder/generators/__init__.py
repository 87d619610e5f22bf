"""Sample data generators."""

from fee_reminder.generators.school import HouseholdGenerator, StudentGenerator

__all__ = ["HouseholdGenerator", "StudentGenerator"]
