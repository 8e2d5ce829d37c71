"""Test suite for the FightPulse backend."""
