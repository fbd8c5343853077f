"""Tests for the Kingdom engine."""
