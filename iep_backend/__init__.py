"""Orchestration core for rate-limited IEP extraction batches."""
