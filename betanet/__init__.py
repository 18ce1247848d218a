"""Betanet node configuration core."""
