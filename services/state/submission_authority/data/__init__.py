"""SQL persistence for Submission Authority Service."""
