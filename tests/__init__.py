"""Test suite for the spectral cube energy engine."""
