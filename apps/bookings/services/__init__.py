"""Database-backed booking services: availability, holds, locks, access codes."""
