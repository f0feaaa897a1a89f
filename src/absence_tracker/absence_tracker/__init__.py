"""Absence Tracker package.

Feature modules (scoring, trainees, absences, reports) with a thin Flask
controller layer over service/repository layers. The scoring engine is pure
and can be used on its own.
"""
