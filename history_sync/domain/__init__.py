"""Framework-agnostic domain models for check-in history."""
