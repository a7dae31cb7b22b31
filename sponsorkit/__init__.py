"""SponsorKit: child sponsorship records and reporting API."""

__version__ = "1.0.0"
