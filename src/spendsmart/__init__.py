"""
SpendSmart - personal finance backend.

Packages:
- spendsmart: configuration, Supabase access, local storage, CLI
- onboarding: onboarding wizard and preference persistence
"""

__version__ = "1.0.0"
