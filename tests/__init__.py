"""Test suite for Genflow SDK."""
