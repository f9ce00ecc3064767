"""Leave Desk — role-based leave management service."""
