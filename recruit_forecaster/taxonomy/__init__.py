"""
Enumerations shared across the forecaster.

Modules
-------
posting_taxonomy : PeriodicPattern, MatchReason, ConfidenceLevel,
                   DutyCategory, EmploymentType.
"""
