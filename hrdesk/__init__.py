"""HRDesk: multi-tenant HR management API."""
