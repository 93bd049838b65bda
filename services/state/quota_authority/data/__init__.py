"""SQL persistence for Quota Authority Service."""
