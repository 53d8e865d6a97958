"""Multi-vendor marketplace order core."""
