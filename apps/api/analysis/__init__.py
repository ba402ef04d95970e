"""Comment analysis package."""
