"""Scenarios for generating realistic school fee data sets."""

from fee_reminder.scenarios.school_year import SchoolYearScenario

__all__ = ["SchoolYearScenario"]
