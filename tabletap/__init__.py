"""TableTap: multi-tenant cafe ordering and management service."""
