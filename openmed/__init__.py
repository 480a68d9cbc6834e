"""
Openmed API

FastAPI service for the Openmed medical appointment client: user signup
and authentication, person records, facility lookup through a geocoding
provider and role-based navigation checks.
"""

__version__ = "1.0.0"
