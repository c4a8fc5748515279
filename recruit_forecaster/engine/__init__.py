"""
Recruitment posting prediction engine — pure functions over in-memory records.

Modules
-------
pattern   : detect_pattern() + is_pattern_match() + typical_months().
scoring   : ConfidenceComponents dataclass + score_confidence()
            + confidence_level().
forecast  : generate_forecasts() + generate_forecasts_with_evidence()
            + build_evidence().
predictor : predict_next() — single-organization interactive answer.
summary   : summarize_organization() + search_organization_patterns().

No module in this package performs I/O or reads the wall clock except through
the ``now`` parameter default.
"""
