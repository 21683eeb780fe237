"""AutoHeal: failure triage and selector approval for Cypress end-to-end runs."""

__version__ = "0.1.0"
