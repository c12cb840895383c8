"""HTTP routes for the enquiry service."""

from enquiry.api.contact import router

__all__ = ["router"]
