"""Pydantic models for bars, indicators, trend, broker flow, screens and plans."""
