"""complaintdesk application package."""
