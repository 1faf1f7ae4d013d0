"""Releasebox - release-build orchestrator for multi-platform binary archives."""
