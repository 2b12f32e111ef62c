"""Employee Onboarding - Onboard API service.

FastAPI service for CSV employee onboarding (upload, list, reset).
"""

__all__: list[str] = []
