"""Domo household onboarding backend."""
