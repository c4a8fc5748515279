"""Recruitment posting forecaster: heuristic prediction of when organizations post jobs next."""

__version__ = "0.1.0"
