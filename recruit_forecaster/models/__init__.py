"""
Domain records.

Modules
-------
posting    : Posting, OrganizationHistory — engine inputs.
prediction : Evidence, PredictionBasis, Prediction, NextPostingPrediction,
             OrganizationPattern — engine outputs.
"""
