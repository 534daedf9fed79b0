"""
Evaluation Package
==================

Contains the FLOAT rate audit used to check long-run rate convergence.
"""

from neondrop.evaluation.rate_audit import audit_packages, heights_for_profile

__all__ = ["audit_packages", "heights_for_profile"]
