"""
Reporting: everything between engine output and the user.

Modules
-------
export     : top_predictions() + predictions_to_records()
             + build_predictions_payload() + JSON/CSV writers.
formatters : ASCII tables for CLI output.
"""
