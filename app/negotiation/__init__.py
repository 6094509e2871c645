"""Negotiation decision logic: analysis, escalation and reply generation."""
